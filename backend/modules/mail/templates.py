"""
Content of account emails and the verification landing page.

User-supplied values are HTML-escaped before they are placed in markup.
"""

from html import escape

from .models import OutgoingEmail

PAGE_STYLE = (
    "*{margin:0;padding:0;box-sizing:border-box}"
    "body{font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;"
    "min-height:100vh;display:flex;align-items:center;justify-content:center;"
    "background:#f8fafc;padding:20px}"
    ".card{background:#fff;border-radius:12px;box-shadow:0 4px 24px rgba(0,0,0,.08);"
    "max-width:440px;width:100%;padding:40px;text-align:center}"
    "h1{font-size:22px;margin:16px 0 8px}p{color:#64748b;line-height:1.5}"
)


def password_email(
    email: str,
    full_name: str | None,
    temporary_password: str,
    login_url: str,
    verify_url: str | None = None,
) -> OutgoingEmail:
    """Credentials for a newly provisioned or reset account."""
    greeting_name = full_name or email

    text_lines = [
        f"Hello {greeting_name},",
        "",
        "Your CuraFlow account is ready. Here are your sign-in details:",
        "",
        f"Email: {email}",
        f"Password: {temporary_password}",
        "",
        "Please change your password after your first sign-in.",
        "",
        f"Sign in: {login_url}",
    ]
    if verify_url:
        text_lines += ["", "Please confirm your email address with this link:", verify_url]
    text_lines += ["", "Kind regards,", "Your CuraFlow system"]

    verify_block = ""
    if verify_url:
        verify_block = (
            '<hr style="border:none;border-top:1px solid #e2e8f0;margin:24px 0">'
            '<p style="color:#64748b">Please also confirm your email address:</p>'
            f'<p style="text-align:center;margin:24px 0"><a href="{escape(verify_url)}" '
            'style="background:#16a34a;color:#fff;padding:12px 28px;border-radius:8px;'
            'text-decoration:none;font-weight:600">Confirm email</a></p>'
        )

    html = (
        '<div style="font-family:sans-serif;max-width:600px;margin:0 auto;color:#1e293b">'
        '<h2 style="color:#4f46e5">Welcome to CuraFlow!</h2>'
        f"<p>Hello <strong>{escape(greeting_name)}</strong>,</p>"
        "<p>Your CuraFlow account is ready. Here are your sign-in details:</p>"
        '<div style="background:#f1f5f9;border-radius:8px;padding:20px;margin:20px 0">'
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        f"<p><strong>Password:</strong> <code>{escape(temporary_password)}</code></p>"
        "</div>"
        '<p style="color:#dc2626;font-weight:600">Please change your password after your first sign-in!</p>'
        f'<p style="text-align:center;margin:24px 0"><a href="{escape(login_url)}" '
        'style="background:#4f46e5;color:#fff;padding:14px 32px;border-radius:8px;'
        'text-decoration:none;font-weight:600">Sign in now</a></p>'
        f"{verify_block}"
        '<p style="font-size:13px;color:#94a3b8">This email was sent automatically by CuraFlow.</p>'
        "</div>"
    )

    return OutgoingEmail(
        to=email,
        subject="[CuraFlow] Your account is ready",
        text="\n".join(text_lines),
        html=html,
    )


def smtp_check_email(to: str, sender: str, timestamp: str) -> OutgoingEmail:
    """Message an administrator sends to check the SMTP settings."""
    return OutgoingEmail(
        to=to,
        subject="[CuraFlow] Email test successful",
        text=f"Email delivery works.\n\nFrom: {sender}\nTimestamp: {timestamp}",
        html=(
            '<div style="font-family:sans-serif;max-width:500px;margin:0 auto;padding:20px">'
            '<h2 style="color:#16a34a">Email test successful</h2>'
            f"<p>From: {escape(sender)}</p>"
            f'<p style="color:#64748b;font-size:13px">Timestamp: {escape(timestamp)}</p>'
            "</div>"
        ),
    )


def verification_page(title: str, message: str, success: bool) -> str:
    """Standalone HTML page shown after following a verification link."""
    color = "#16a34a" if success else "#dc2626"
    icon = "&#10003;" if success else "&#10007;"
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1">'
        f"<title>CuraFlow - {escape(title)}</title><style>{PAGE_STYLE}</style></head>"
        f'<body><div class="card"><div style="font-size:48px;color:{color}">{icon}</div>'
        f'<h1 style="color:{color}">{escape(title)}</h1><p>{escape(message)}</p></div>'
        "</body></html>"
    )
