# /clinic_api/utils/email_util.py
import atexit
import smtplib
import ssl
from concurrent.futures import ThreadPoolExecutor
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app

def send_password_reset_email(recipient_email: str, username: str, reset_url: str):
    """
    Sends a password recovery link to a user.

    Args:
        recipient_email (str): The user's email address.
        username (str): The user's username.
        reset_url (str): The link embedding the plaintext reset token.
    """
    config = current_app.config
    mail_server = config.get('MAIL_SERVER')
    mail_port = config.get('MAIL_PORT', 587)
    mail_username = config.get('MAIL_USERNAME')
    mail_password = config.get('MAIL_PASSWORD')

    if not all([mail_server, mail_port, mail_username, mail_password]):
        current_app.logger.error("Email server is not configured. Cannot send password reset email.")
        return

    sender_email = config.get('MAIL_DEFAULT_SENDER') or mail_username

    message = MIMEMultipart("alternative")
    message["Subject"] = "Your password reset token (valid for 1 hour)"
    message["From"] = sender_email
    message["To"] = recipient_email

    text = f"""
    Hello {username},

    Forgot your password? Submit a PATCH request with your new password and
    passwordConfirm to: {reset_url}

    If you didn't forget your password, please ignore this email.
    """

    html = f"""
    <html>
      <body>
        <h2>Password reset</h2>
        <p>Hello {username},</p>
        <p>Forgot your password? Use the link below to choose a new one. It expires in one hour.</p>
        <p><a href="{reset_url}">{reset_url}</a></p>
        <p>If you didn't forget your password, please ignore this email.</p>
      </body>
    </html>
    """

    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))

    context = ssl.create_default_context()
    with smtplib.SMTP(mail_server, mail_port) as server:
        if config.get('MAIL_USE_TLS', True):
            server.starttls(context=context)
        server.login(mail_username, mail_password)
        server.sendmail(sender_email, recipient_email, message.as_string())
    current_app.logger.info(f"Sent password reset email to {recipient_email}")


class PasswordResetMailer:
    """
    Dispatches password reset emails off the request thread.

    Delivery failures are logged and never reach the caller; the request
    that triggered the email has already been answered.
    """
    def __init__(self, app=None):
        self.app = None
        self.executor = None
        atexit.register(self.shutdown)
        if app:
            self.init_app(app)

    def init_app(self, app):
        # Rebinding to a new app drains the previous app's workers
        self.shutdown()
        self.app = app
        if not app.config.get('MAIL_SYNC_DISPATCH'):
            self.executor = ThreadPoolExecutor(
                max_workers=app.config.get('MAIL_MAX_WORKERS', 2),
                thread_name_prefix='mailer'
            )

    def dispatch(self, recipient_email, username, reset_url):
        if self.app is None:
            raise RuntimeError("PasswordResetMailer has not been initialized with an app.")

        if self.executor is None:
            self._deliver(self.app, recipient_email, username, reset_url)
            return None

        future = self.executor.submit(self._deliver, self.app, recipient_email, username, reset_url)
        return future

    def _deliver(self, app, recipient_email, username, reset_url):
        with app.app_context():
            try:
                send_password_reset_email(recipient_email, username, reset_url)
            except Exception as e:
                current_app.logger.error(f"Failed to send password reset email to {recipient_email}: {e}")

    def shutdown(self):
        """Waits for queued emails to go out. Registered to run at interpreter exit."""
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None


# Create a single, uninitialized instance to be imported by other modules.
mailer = PasswordResetMailer()
