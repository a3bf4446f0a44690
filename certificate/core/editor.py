"""Editor session: ties the state container to persistence and the backend."""

from __future__ import annotations

import logging
from typing import Optional

from .api_client import TemplateApiClient
from .errors import EditorError, SaveFailure
from .image_loader import ImageLoader
from .models import ImageElement, LocalFile
from .persistence import Submission, deserialize, serialize_state
from .preview import PreviewContext, PreviewScene, render_preview
from .renderer import CertificateRenderer
from .settings import EditorSettings
from .state import TemplateState

logger = logging.getLogger(__name__)


class TemplateEditor:
    """Load, edit, preview and submit one certificate template.

    Both failure kinds are non-fatal: after :class:`LoadFailure` the state is
    untouched (defaults), after :class:`SaveFailure` edits are kept for a
    manual retry.
    """

    def __init__(
        self,
        settings: EditorSettings,
        client: Optional[TemplateApiClient] = None,
        state: Optional[TemplateState] = None,
        image_loader: Optional[ImageLoader] = None,
    ):
        self.settings = settings
        self.client = client or TemplateApiClient(settings)
        self.state = state or TemplateState()
        self.image_loader = image_loader or ImageLoader(timeout=settings.timeout)
        self.template_id = None

    # ------------------------------------------------------------------
    def fetch(self, template_id):
        """Network half of :meth:`load`; safe to run off the UI thread."""
        record = self.client.fetch_template(template_id)
        info, elements = deserialize(record, self.settings.asset_base)
        remote = [info.background_image] + [
            el.image for el in elements.values() if isinstance(el, ImageElement)
        ]
        self.image_loader.prefetch(s for s in remote if s and not isinstance(s, LocalFile))
        return info, elements

    def apply(self, template_id, info, elements) -> None:
        self.state.replace(info, elements)
        self.template_id = template_id
        logger.info("Loaded certificate template %s", template_id)

    def load(self, template_id) -> None:
        info, elements = self.fetch(template_id)
        self.apply(template_id, info, elements)

    # ------------------------------------------------------------------
    def build_submission(self) -> Submission:
        return serialize_state(self.state)

    def submit(self, submission: Submission) -> dict:
        """Network half of :meth:`save`."""
        if self.template_id is None:
            return self.client.create_template(submission)
        return self.client.update_template(self.template_id, submission)

    def finish_save(self, created: bool) -> None:
        if created:
            # a created template starts the next one from scratch
            self.state.reset()
        logger.info("Certificate template saved (%s)", "created" if created else "updated")

    def save(self) -> dict:
        created = self.template_id is None
        result = self.submit(self.build_submission())
        self.finish_save(created)
        return result

    def delete(self) -> None:
        if self.template_id is None:
            raise SaveFailure("No stored template to delete")
        self.client.delete_template(self.template_id)
        self.template_id = None
        self.state.reset()

    def new_template(self) -> None:
        self.template_id = None
        self.state.reset()

    # ------------------------------------------------------------------
    def preview(self, context: Optional[PreviewContext] = None) -> PreviewScene:
        return render_preview(self.state, context)

    def export_preview(self, path: str, context: Optional[PreviewContext] = None) -> str:
        # remote assets come from the prefetch cache only
        renderer = CertificateRenderer(self.image_loader, fetch_remote=False)
        try:
            return renderer.save(self.preview(context), path)
        except OSError as e:
            raise EditorError(f"Could not write preview {path}: {e}") from e
