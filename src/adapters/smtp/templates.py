"""
Email templates for account notifications.

Each render function returns (subject, html_body). Links are absolute,
built from the configured base URL, and point at the web client routes.
"""

from html import escape

from src.domain.ports import User


def _greeting(user: User) -> str:
    name = user.first_name or user.login
    return f"Dear {escape(name)}"


def _page(title: str, body: str) -> str:
    return f"""
        <html>
            <head><title>{title}</title></head>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                {body}
                <p style="color: #64748b; font-size: 14px; margin-top: 30px;">
                    Regards,<br/>The accountkeeper team
                </p>
            </body>
        </html>
    """


def render_activation_email(user: User, base_url: str) -> tuple[str, str]:
    subject = "accountkeeper account activation"
    link = f"{base_url}/#/activate?key={user.activation_key}"
    body = f"""
        <p>{_greeting(user)}</p>
        <p>Your account has been created, please click on the URL below to activate it:</p>
        <p><a href="{link}">{link}</a></p>
    """
    return subject, _page(subject, body)


def render_password_reset_email(user: User, base_url: str) -> tuple[str, str]:
    subject = "accountkeeper password reset"
    link = f"{base_url}/#/reset/finish?key={user.reset_key}"
    body = f"""
        <p>{_greeting(user)}</p>
        <p>For your account a password reset was requested, please click on the URL below to reset it:</p>
        <p><a href="{link}">{link}</a></p>
    """
    return subject, _page(subject, body)
