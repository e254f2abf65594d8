# SPDX-License-Identifier: Apache-2.0

"""
Local disk storage for issue attachments.
"""

import logging
import os
import uuid
from typing import Dict

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """Saves uploads under one directory served at ``/uploads/<name>``."""

    url_prefix = "/uploads"

    def __init__(self, upload_dir: str):
        self.upload_dir = os.path.abspath(upload_dir)

    def save(self, file: FileStorage) -> Dict[str, str]:
        """
        Write an upload to disk under a unique name.

        Returns:
            Attachment reference with url, original filename and content type
        """
        os.makedirs(self.upload_dir, exist_ok=True)

        original = file.filename or "upload"
        stored_name = f"{uuid.uuid4().hex}-{secure_filename(original) or 'upload'}"
        file.save(os.path.join(self.upload_dir, stored_name))

        logger.info("Attachment stored", extra={"stored_name": stored_name})
        return {
            "url": f"{self.url_prefix}/{stored_name}",
            "filename": original,
            "contentType": file.mimetype or "application/octet-stream"
        }
