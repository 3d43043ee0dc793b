"""
Message Templates
=================
Text bodies for OTP delivery.
"""

from dataclasses import dataclass


@dataclass
class EmailContent:
    subject: str
    text: str
    html: str


def render_sms(brand: str, code: str, expiry_minutes: int, resent: bool = False) -> str:
    label = "verification code (resent)" if resent else "verification code"
    return (
        f"{brand} {label}: {code}. "
        f"This code expires in {expiry_minutes} minutes. "
        f"Do not share this code with anyone."
    )


def render_email(brand: str, code: str, expiry_minutes: int, resent: bool = False) -> EmailContent:
    suffix = " (Resent)" if resent else ""
    heading = "Here's your new verification code:" if resent else (
        "Please use the following verification code to complete your authentication:"
    )
    text = (
        f"{heading}\n\n"
        f"    {code}\n\n"
        f"This code will expire in {expiry_minutes} minutes.\n"
        f"If you didn't request this code, please ignore this email.\n"
    )
    html = f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="padding: 20px; text-align: center;">
    <h1 style="margin: 0;">{brand}</h1>
  </div>
  <div style="padding: 30px; background: #f8f9fa;">
    <h2 style="color: #333;">Email Verification{suffix}</h2>
    <p style="color: #666;">{heading}</p>
    <div style="background: #fff; padding: 20px; border-radius: 8px; text-align: center;">
      <h1 style="font-size: 36px; margin: 0; letter-spacing: 8px;">{code}</h1>
    </div>
    <p style="color: #666; margin-top: 20px; font-size: 14px;">
      This code will expire in {expiry_minutes} minutes.<br>
      If you didn't request this code, please ignore this email.
    </p>
  </div>
</div>
"""
    return EmailContent(
        subject=f"{brand} - Email Verification Code{suffix}",
        text=text,
        html=html,
    )
