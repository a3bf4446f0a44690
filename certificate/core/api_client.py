import logging
from contextlib import ExitStack
from typing import Optional

import requests

from .errors import LoadFailure, SaveFailure
from .persistence import Submission, unwrap_record
from .settings import EditorSettings

logger = logging.getLogger(__name__)


class TemplateApiClient:
    """HTTP access to the certificate-template endpoints of the LMS backend."""

    def __init__(self, settings: EditorSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        if settings.api_token:
            self.session.headers["Authorization"] = f"Bearer {settings.api_token}"
        self.session.headers.setdefault("Accept", "application/json")

    def _url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    def fetch_template(self, template_id) -> dict:
        url = self._url(f"certificate-templates/{template_id}")
        try:
            response = self.session.get(url, timeout=self.settings.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Fetching template %s failed: %s", template_id, e)
            raise LoadFailure(f"Could not load template {template_id}: {e}") from e

        return unwrap_record(payload)

    def create_template(self, submission: Submission) -> dict:
        return self._submit("POST", self._url("certificate-templates"), submission)

    def update_template(self, template_id, submission: Submission) -> dict:
        return self._submit("PUT", self._url(f"certificate/{template_id}"), submission)

    def delete_template(self, template_id) -> None:
        url = self._url(f"certificate/{template_id}")
        try:
            response = self.session.delete(url, timeout=self.settings.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Deleting template %s failed: %s", template_id, e)
            raise SaveFailure(f"Could not delete template {template_id}: {e}") from e

    # ------------------------------------------------------------------
    def _submit(self, method: str, url: str, submission: Submission) -> dict:
        try:
            with ExitStack() as stack:
                # (None, value) parts keep text fields in the multipart body
                parts = [(name, (None, value)) for name, value in submission.fields]
                parts.extend(
                    (name, (upload.filename, stack.enter_context(upload.open()), upload.mime_type))
                    for name, upload in submission.files
                )
                response = self.session.request(
                    method,
                    url,
                    files=parts,
                    timeout=self.settings.timeout,
                )
            response.raise_for_status()
        except (requests.RequestException, OSError) as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise SaveFailure(f"Could not save template: {e}") from e

        try:
            return response.json()
        except ValueError:
            logger.debug("%s %s returned a non-JSON body", method, url)
            return {}
