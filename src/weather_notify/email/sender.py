# ABOUTME: SMTP mailer for subscription confirmations and weather updates.
# ABOUTME: Renders Jinja2 text templates and delivers them over STARTTLS.

import smtplib
from email.message import EmailMessage

import structlog
from jinja2 import Environment, FileSystemLoader

from weather_notify.config import Settings, get_settings
from weather_notify.exceptions import UpstreamUnavailableError

log = structlog.get_logger()

CONFIRMATION_TXT_TEMPLATE = "confirmation_email.txt"
WEATHER_UPDATE_TXT_TEMPLATE = "weather_update.txt"


class EmailSender:
    """Sends subscription emails via SMTP."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._jinja_env: Environment | None = None

    @property
    def jinja_env(self) -> Environment:
        """Lazy-initialized Jinja2 environment."""
        if self._jinja_env is None:
            self._jinja_env = Environment(
                loader=FileSystemLoader(str(self.settings.templates_dir)),
                autoescape=False,
                keep_trailing_newline=True,
            )
        return self._jinja_env

    def confirm_url(self, token: str) -> str:
        """Build the public confirmation link for a token."""
        return f"{self.settings.app_base_url}/api/confirm/{token}"

    def send_confirmation(self, email: str, token: str) -> None:
        """Send subscription confirmation email.

        Args:
            email: Address that asked to subscribe.
            token: Confirmation token embedded in the link.
        """
        log.info("sending_confirmation_email", to=email)

        txt_template = self.jinja_env.get_template(CONFIRMATION_TXT_TEMPLATE)
        txt_content = txt_template.render(confirm_url=self.confirm_url(token))

        message = self._build_message(email, self.settings.confirmation_email_subject, txt_content)
        self._send_smtp(message, [email])

        log.info("confirmation_email_sent", to=email)

    def send_weather_update(self, email: str, body: str) -> None:
        """Send a weather update whose body was composed by the caller."""
        log.info("sending_weather_update", to=email)

        txt_template = self.jinja_env.get_template(WEATHER_UPDATE_TXT_TEMPLATE)
        txt_content = txt_template.render(body=body, sender_name=self.settings.sender_name)

        message = self._build_message(email, self.settings.weather_update_subject, txt_content)
        self._send_smtp(message, [email])

        log.info("weather_update_sent", to=email)

    def _build_message(self, to_email: str, subject: str, content: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"{self.settings.sender_name} <{self.settings.sender_email}>"
        message["To"] = to_email
        message.set_content(content)
        return message

    def _send_smtp(self, message: EmailMessage, recipients: list[str]) -> None:
        """Send email via SMTP.

        Raises:
            UpstreamUnavailableError: If credentials are missing or the transport fails.
        """
        if not self.settings.smtp_user or not self.settings.smtp_password:
            raise UpstreamUnavailableError(
                "SMTP credentials not configured. Set smtp_user and smtp_password in .env file."
            )

        log.debug(
            "connecting_smtp",
            host=self.settings.smtp_host,
            port=self.settings.smtp_port,
        )

        try:
            server = smtplib.SMTP(
                self.settings.smtp_host,
                self.settings.smtp_port,
                timeout=self.settings.smtp_timeout,
            )
            try:
                server.ehlo()
                server.starttls()
                server.ehlo()
                server.login(
                    self.settings.smtp_user.get_secret_value(),
                    self.settings.smtp_password.get_secret_value(),
                )
                server.send_message(message, to_addrs=recipients)
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            log.error("smtp_send_failed", recipients=recipients, error=str(e))
            raise UpstreamUnavailableError(f"failed to send email: {e}") from e
