"""HTML and plain-text email templates.

Every template returns an ``EmailTemplate`` with a subject, an HTML body built
on the shared layout, and a plain-text fallback. User-supplied values are
HTML-escaped before they reach the HTML body.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from html import escape
from string import Template
from urllib.parse import urlencode

APP_NAME = "Subscription Tracker"


class NotificationEvent(str, Enum):
    """Events that trigger an email."""

    WELCOME = "welcome"
    REMINDER = "reminder"
    PASSWORD_RESET = "password_reset"
    MONTHLY_REPORT = "monthly_report"
    VERIFICATION = "verification"
    CANCELLATION = "cancellation"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class EmailTemplate:
    """A rendered email ready for a transport."""

    subject: str
    html: str
    text: str


_BASE_LAYOUT = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>
        body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6;
               color: #333; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f4f4f4; }
        .email-container { background-color: #ffffff; border-radius: 8px;
                           box-shadow: 0 2px 10px rgba(0,0,0,0.1); overflow: hidden; }
        .email-header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
                        color: white; padding: 30px; text-align: center; }
        .email-header h1 { margin: 0; font-size: 28px; font-weight: 300; }
        .email-body { padding: 40px 30px; }
        .email-footer { background-color: #f8f9fa; padding: 20px 30px; text-align: center;
                        font-size: 14px; color: #666; border-top: 1px solid #eee; }
        .btn { display: inline-block; padding: 12px 24px; color: white; text-decoration: none;
               background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
               border-radius: 6px; font-weight: 500; margin: 20px 0; }
        .alert { padding: 15px; border-radius: 6px; margin: 20px 0; }
        .alert-success { background-color: #d4edda; border: 1px solid #c3e6cb; color: #155724; }
        .alert-warning { background-color: #fff3cd; border: 1px solid #ffeaa7; color: #856404; }
        .alert-danger { background-color: #f8d7da; border: 1px solid #f5c6cb; color: #721c24; }
        .alert-info { background-color: #d1ecf1; border: 1px solid #bee5eb; color: #0c5460; }
        .subscription-card { background: #f8f9fa; border: 1px solid #e9ecef; border-radius: 6px;
                             padding: 20px; margin: 15px 0; }
        .subscription-card h3 { margin-top: 0; color: #495057; }
        .price { font-size: 24px; font-weight: bold; color: #667eea; }
        .text-center { text-align: center; }
        .text-muted { color: #6c757d; }
        @media only screen and (max-width: 600px) {
            body { padding: 10px; }
            .email-body, .email-header { padding: 20px; }
            .email-header h1 { font-size: 24px; }
        }
    </style>
</head>
<body>
    <div class="email-container">
        <div class="email-header">
            <h1>$app_name</h1>
        </div>
        <div class="email-body">
            $content
        </div>
        <div class="email-footer">
            $footer
        </div>
    </div>
</body>
</html>
""")

_DEFAULT_FOOTER = f"""<p>This email was sent from {APP_NAME}</p>
            <p class="text-muted">If you have any questions, please don't hesitate to contact us.</p>"""

ALERT_TYPES = ("success", "warning", "danger", "info")


def base_template(title: str, content: str, footer: str = "") -> str:
    """Wrap body content in the shared email layout."""
    return _BASE_LAYOUT.substitute(
        title=escape(title),
        app_name=APP_NAME,
        content=content,
        footer=footer or _DEFAULT_FOOTER,
    )


def _link(base_url: str | None, path: str, fallback: str = "#") -> str:
    return f"{(base_url or fallback).rstrip('/')}{path}"


def format_amount(amount: float, currency: str | None = None) -> str:
    """Render a price with its currency code or symbol."""
    if not currency:
        return f"${amount:.2f}"
    if currency.isalpha():
        return f"{currency} {amount:.2f}"
    return f"{currency}{amount:.2f}"


def format_date(value: date | datetime | str | None) -> str:
    """Render a date as e.g. ``January 31, 2024``."""
    if value is None:
        return "N/A"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.strftime("%B %d, %Y")


def welcome_template(user_name: str, user_email: str, base_url: str | None = None) -> EmailTemplate:
    """Welcome email for a newly registered user."""
    content = f"""
        <h2>Welcome to {APP_NAME}, {escape(user_name)}! 🎉</h2>
        <p>Thank you for joining our community! We're excited to help you manage your subscriptions more effectively.</p>

        <div class="alert alert-success">
            <strong>Your account has been successfully created!</strong><br>
            Email: {escape(user_email)}
        </div>

        <h3>What's Next?</h3>
        <ul>
            <li>📱 Add your first subscription</li>
            <li>🔔 Set up payment reminders</li>
            <li>📊 Track your spending patterns</li>
            <li>💰 Discover potential savings</li>
        </ul>

        <div class="text-center">
            <a href="{escape(_link(base_url, '/dashboard'))}" class="btn">Get Started</a>
        </div>

        <p>If you have any questions or need assistance, our support team is here to help!</p>
    """
    return EmailTemplate(
        subject=f"Welcome to {APP_NAME} - Let's Get Started!",
        html=base_template(f"Welcome to {APP_NAME}", content),
        text=(
            f"Welcome to {APP_NAME}, {user_name}! Your account has been successfully created "
            f"with email: {user_email}. Start managing your subscriptions today!"
        ),
    )


def subscription_reminder_template(
    user_name: str,
    subscription: dict,
    base_url: str | None = None,
) -> EmailTemplate:
    """Upcoming payment reminder.

    ``subscription`` carries ``name``, ``amount``, ``currency``,
    ``renewal_date`` and optionally ``category`` and ``days_left``.
    """
    name = subscription["name"]
    formatted_amount = format_amount(subscription["amount"], subscription.get("currency"))
    formatted_date = format_date(subscription.get("renewal_date"))
    category = subscription.get("category") or "General"
    days_left = subscription.get("days_left")
    due_in = f" in {days_left} day{'s' if days_left != 1 else ''}" if days_left is not None else " soon"

    content = f"""
        <h2>Payment Reminder 💳</h2>
        <p>Hi {escape(user_name)},</p>
        <p>This is a friendly reminder that your subscription payment is due{due_in}.</p>

        <div class="subscription-card">
            <h3>{escape(name)}</h3>
            <p><strong>Category:</strong> {escape(str(category))}</p>
            <p><strong>Amount:</strong> <span class="price">{escape(formatted_amount)}</span></p>
            <p><strong>Renewal Date:</strong> {formatted_date}</p>
        </div>

        <div class="alert alert-warning">
            <strong>Action Required:</strong> Please ensure you have sufficient funds in your account or update your payment method if needed.
        </div>

        <div class="text-center">
            <a href="{escape(_link(base_url, '/subscriptions'))}" class="btn">Manage Subscription</a>
        </div>
    """
    return EmailTemplate(
        subject=f"Payment Reminder: {name} - {formatted_amount} due {formatted_date}",
        html=base_template("Subscription Payment Reminder", content),
        text=(
            f"Hi {user_name}, your {name} subscription of {formatted_amount} is due on "
            f"{formatted_date}. Please ensure your payment method is up to date."
        ),
    )


def password_reset_template(
    user_name: str,
    reset_token: str,
    expires_in: int = 15,
    base_url: str | None = None,
) -> EmailTemplate:
    """Password reset link; ``expires_in`` is in minutes."""
    query = urlencode({"token": reset_token})
    reset_url = _link(base_url, f"/reset-password?{query}", fallback="")

    content = f"""
        <h2>Password Reset Request 🔐</h2>
        <p>Hi {escape(user_name)},</p>
        <p>We received a request to reset your password for your {APP_NAME} account.</p>

        <div class="text-center">
            <a href="{escape(reset_url)}" class="btn">Reset Your Password</a>
        </div>

        <div class="alert alert-warning">
            <strong>Important:</strong> This link will expire in {expires_in} minutes for security reasons.
        </div>

        <p>If you didn't request this password reset, please ignore this email. Your password will remain unchanged.</p>

        <p><strong>For your security:</strong></p>
        <ul>
            <li>Never share your password with anyone</li>
            <li>Use a strong, unique password</li>
            <li>Enable two-factor authentication if available</li>
        </ul>

        <p class="text-muted">If you're having trouble clicking the button, copy and paste this URL into your browser:<br>
        {escape(reset_url)}</p>
    """
    return EmailTemplate(
        subject=f"Reset Your {APP_NAME} Password",
        html=base_template("Password Reset Request", content),
        text=(
            f"Hi {user_name}, you requested a password reset for your {APP_NAME} account. "
            f"Click this link to reset your password: {reset_url} (expires in {expires_in} minutes)"
        ),
    )


def monthly_report_template(user_name: str, report: dict, base_url: str | None = None) -> EmailTemplate:
    """Monthly spending summary built from ``SubscriptionService.monthly_report``."""
    month_name = date(report["year"], report["month"], 1).strftime("%B %Y")
    total_spent = report["total_spent"]
    savings = report.get("savings", 0)

    subscriptions_list = "".join(
        f"""<div class="subscription-card">
            <h4>{escape(sub["name"])}</h4>
            <p><strong>{escape(format_amount(sub["amount"], sub.get("currency")))}</strong> - {escape(str(sub.get("category") or "General"))}</p>
        </div>"""
        for sub in report.get("subscriptions", [])
    )

    savings_block = ""
    if savings > 0:
        savings_block = f"""
        <div class="alert alert-success">
            <strong>Great job! 🎉</strong> You saved <strong>{savings:.2f}</strong> this month by managing your subscriptions wisely.
        </div>
        """

    content = f"""
        <h2>Your {month_name} Subscription Report 📊</h2>
        <p>Hi {escape(user_name)},</p>
        <p>Here's your monthly subscription summary:</p>

        <div class="alert alert-success text-center">
            <h3>Total Spent: <span class="price">{total_spent:.2f}</span></h3>
        </div>

        <div style="display: grid; grid-template-columns: 1fr 1fr; gap: 20px; margin: 20px 0;">
            <div class="text-center">
                <h4>New Subscriptions</h4>
                <p class="price">{report["new_subscriptions"]}</p>
            </div>
            <div class="text-center">
                <h4>Cancelled</h4>
                <p class="price">{report["cancelled_subscriptions"]}</p>
            </div>
        </div>

        {savings_block}

        <h3>Active Subscriptions</h3>
        {subscriptions_list}

        <div class="text-center">
            <a href="{escape(_link(base_url, '/dashboard'))}" class="btn">View Full Dashboard</a>
        </div>
    """
    return EmailTemplate(
        subject=f"Your {month_name} Subscription Report - {total_spent:.2f} Total",
        html=base_template("Monthly Subscription Report", content),
        text=(
            f"Hi {user_name}, your {month_name} subscription report: Total spent {total_spent:.2f}, "
            f"{report['new_subscriptions']} new subscriptions, "
            f"{report['cancelled_subscriptions']} cancelled."
        ),
    )


def email_verification_template(
    user_name: str,
    verification_token: str,
    base_url: str | None = None,
) -> EmailTemplate:
    """Email address verification link."""
    query = urlencode({"token": verification_token})
    verification_url = _link(base_url, f"/verify-email?{query}", fallback="")

    content = f"""
        <h2>Verify Your Email Address ✉️</h2>
        <p>Hi {escape(user_name)},</p>
        <p>Thank you for signing up for {APP_NAME}! To complete your registration and secure your account, please verify your email address.</p>

        <div class="text-center">
            <a href="{escape(verification_url)}" class="btn">Verify Email Address</a>
        </div>

        <div class="alert alert-warning">
            <strong>Important:</strong> You'll need to verify your email before you can access all features of your account.
        </div>

        <p>If you didn't create an account with {APP_NAME}, please ignore this email.</p>

        <p class="text-muted">If you're having trouble clicking the button, copy and paste this URL into your browser:<br>
        {escape(verification_url)}</p>
    """
    return EmailTemplate(
        subject=f"Verify Your Email - {APP_NAME}",
        html=base_template("Email Verification", content),
        text=(
            f"Hi {user_name}, please verify your email address for {APP_NAME} "
            f"by clicking this link: {verification_url}"
        ),
    )


def subscription_cancelled_template(
    user_name: str,
    subscription: dict,
    base_url: str | None = None,
) -> EmailTemplate:
    """Cancellation confirmation.

    ``subscription`` carries ``name``, ``amount``, ``currency`` and
    ``last_payment_date``.
    """
    name = subscription["name"]
    formatted_amount = format_amount(subscription["amount"], subscription.get("currency"))

    content = f"""
        <h2>Subscription Cancelled ✅</h2>
        <p>Hi {escape(user_name)},</p>
        <p>We've successfully cancelled your subscription as requested.</p>

        <div class="subscription-card">
            <h3>{escape(name)}</h3>
            <p><strong>Cost:</strong> {escape(formatted_amount)}</p>
            <p><strong>Last Payment:</strong> {format_date(subscription.get("last_payment_date"))}</p>
            <p><strong>Status:</strong> <span style="color: #dc3545; font-weight: bold;">Cancelled</span></p>
        </div>

        <div class="alert alert-success">
            <strong>Cancellation Confirmed!</strong> You will not be charged again for this subscription.
        </div>

        <p>If you cancelled by mistake or change your mind, you can always re-subscribe later through our platform.</p>

        <div class="text-center">
            <a href="{escape(_link(base_url, '/subscriptions'))}" class="btn">Manage Other Subscriptions</a>
        </div>
    """
    return EmailTemplate(
        subject=f"Subscription Cancelled: {name}",
        html=base_template("Subscription Cancelled", content),
        text=(
            f"Hi {user_name}, your {name} subscription ({formatted_amount}) has been "
            f"successfully cancelled. You will not be charged again."
        ),
    )


def notification_template(
    user_name: str,
    title: str,
    message: str,
    level: str = "info",
    action_url: str | None = None,
    action_text: str = "Learn More",
    base_url: str | None = None,
) -> EmailTemplate:
    """Generic notification; relative ``action_url`` paths are joined to ``base_url``."""
    alert_type = level if level in ALERT_TYPES else "info"
    if action_url and action_url.startswith("/"):
        action_url = _link(base_url, action_url)

    action_block = ""
    if action_url:
        action_block = f"""
        <div class="text-center">
            <a href="{escape(action_url)}" class="btn">{escape(action_text)}</a>
        </div>
        """

    content = f"""
        <h2>{escape(title)}</h2>
        <p>Hi {escape(user_name)},</p>

        <div class="alert alert-{alert_type}">
            {escape(message)}
        </div>

        {action_block}
    """
    return EmailTemplate(
        subject=f"{APP_NAME}: {title}",
        html=base_template(title, content),
        text=f"Hi {user_name}, {title}: {message}",
    )


TEMPLATES = {
    NotificationEvent.WELCOME: welcome_template,
    NotificationEvent.REMINDER: subscription_reminder_template,
    NotificationEvent.PASSWORD_RESET: password_reset_template,
    NotificationEvent.MONTHLY_REPORT: monthly_report_template,
    NotificationEvent.VERIFICATION: email_verification_template,
    NotificationEvent.CANCELLATION: subscription_cancelled_template,
    NotificationEvent.NOTIFICATION: notification_template,
}
