"""Services package."""
from docrelay.services.job_poller import JobPoller
from docrelay.services.papago_client import PapagoDocumentClient
from docrelay.services.uploads import UploadReceiver

__all__ = [
    "JobPoller",
    "PapagoDocumentClient",
    "UploadReceiver",
]
