import json
from typing import Any
from urllib import error, request


class EmailDeliveryError(Exception):
    pass


class SendGridEmailClient:
    def __init__(
        self,
        api_url: str,
        api_key: str,
        from_address: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.from_address = from_address
        self.timeout_seconds = timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip() and self.from_address.strip())

    def send_text_email(self, *, to_address: str, subject: str, body: str) -> None:
        payload: dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_address}]}],
            "from": {"email": self.from_address},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        req = request.Request(
            f"{self.api_url}/mail/send",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )

        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                status_code = getattr(response, "status", 202)
                if status_code >= 300:
                    raise EmailDeliveryError(f"Mail API returned status {status_code}")
        except error.HTTPError as exc:
            try:
                error_body = exc.read().decode("utf-8")
            except Exception:
                error_body = "Unknown error"
            raise EmailDeliveryError(f"HTTP Error {exc.code}: {error_body}") from exc
        except error.URLError as exc:
            raise EmailDeliveryError(f"Network Error: {exc.reason}") from exc
        except OSError as exc:
            raise EmailDeliveryError(f"Network Error: {exc}") from exc
