"""
OTP Metrics
===========
Prometheus counters for OTP issuance and verification outcomes.
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest

OTP_REGISTRY = CollectorRegistry()

OTP_REQUESTS_TOTAL = Counter(
    name="otp_requests_total",
    documentation="OTP issuance requests by channel and outcome",
    labelnames=["channel", "outcome"],
    registry=OTP_REGISTRY,
)

OTP_VERIFICATIONS_TOTAL = Counter(
    name="otp_verifications_total",
    documentation="OTP verification attempts by outcome",
    labelnames=["outcome"],
    registry=OTP_REGISTRY,
)

OTP_RESENDS_TOTAL = Counter(
    name="otp_resends_total",
    documentation="OTP resend requests by outcome",
    labelnames=["outcome"],
    registry=OTP_REGISTRY,
)

OTP_SWEPT_SESSIONS_TOTAL = Counter(
    name="otp_swept_sessions_total",
    documentation="Expired OTP sessions removed by the sweeper",
    registry=OTP_REGISTRY,
)


def record_request(channel: str, outcome: str) -> None:
    OTP_REQUESTS_TOTAL.labels(channel=channel, outcome=outcome).inc()


def record_verification(outcome: str) -> None:
    OTP_VERIFICATIONS_TOTAL.labels(outcome=outcome).inc()


def record_resend(outcome: str) -> None:
    OTP_RESENDS_TOTAL.labels(outcome=outcome).inc()


def record_swept(count: int) -> None:
    if count:
        OTP_SWEPT_SESSIONS_TOTAL.inc(count)


def get_metrics_text() -> bytes:
    """Prometheus exposition text for the OTP registry."""
    return generate_latest(OTP_REGISTRY)
