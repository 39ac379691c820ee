"""Binary upload to a staged target."""

from __future__ import annotations

import requests

from auction_publisher.errors import UploadError
from auction_publisher.platforms.base import StagedTarget


class StagedAssetUploader:
    """Posts image bytes to the storage URL issued by ``stagedUploadsCreate``.

    The signed form fields are sent exactly as issued, in order, followed by
    the payload under ``file``. A single attempt is made.
    """

    FILE_FIELD = "file"

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def upload(self, target: StagedTarget, data: bytes, content_type: str) -> None:
        fields = [(parameter.name, parameter.value) for parameter in target.parameters]
        remote_name = target.key or "file"
        files = {self.FILE_FIELD: (remote_name, data, content_type)}

        try:
            response = self._session.post(
                target.url,
                data=fields,
                files=files,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Upload to staging URL failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise UploadError(
                f"Upload to staging URL failed: {response.status_code} {response.reason or ''}".rstrip(),
                status=response.status_code,
                body=response.text,
            )
