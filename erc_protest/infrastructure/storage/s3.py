"""AWS S3 artifact sink - publishes package files and returns shareable links."""
import logging
import re
from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


def _slugify(value: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_")
    return slug[:60] or "business"


class S3ArtifactSink:
    """
    Uploads the primary PDF and archive under ``<prefix>/<tracking_id>_<business>/``
    and returns presigned links to them.
    """

    def __init__(
        self,
        bucket_name: str,
        prefix: str = "erc-protests",
        region: Optional[str] = None,
        link_expires_seconds: int = 7 * 24 * 3600,
        client=None,
    ):
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.link_expires_seconds = link_expires_seconds
        self.client = client or boto3.client("s3", region_name=region)

    def folder_key(self, tracking_id: str, business_name: str) -> str:
        folder = f"{tracking_id}_{_slugify(business_name)}"
        return f"{self.prefix}/{folder}" if self.prefix else folder

    def upload_file(self, local_path: str, s3_key: str) -> str:
        """Upload a file and return a presigned download link."""
        local_file = Path(local_path)
        if not local_file.exists():
            raise FileNotFoundError(f"Local file not found: {local_path}")
        if local_file.stat().st_size == 0:
            raise RuntimeError(f"Refusing to upload empty file: {local_path}")

        try:
            self.client.upload_file(str(local_file), self.bucket_name, s3_key)
            logger.info(f"Uploaded {local_path} to s3://{self.bucket_name}/{s3_key}")
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": s3_key},
                ExpiresIn=self.link_expires_seconds,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            raise RuntimeError(f"Failed to upload file to S3: {error_code} - {error_message}") from e
        except BotoCoreError as e:
            raise RuntimeError(f"AWS service error uploading file to S3: {str(e)}") from e

    def publish(self, tracking_id: str, business_name: str, primary_pdf_path: str, archive_path: str) -> Dict[str, str]:
        """
        Publish a finished package.

        Returns:
            Dict with ``protest_letter_link``, ``zip_package_link`` and ``folder_link``
        """
        folder = self.folder_key(tracking_id, business_name)
        letter_link = self.upload_file(primary_pdf_path, f"{folder}/{Path(primary_pdf_path).name}")
        zip_link = self.upload_file(archive_path, f"{folder}/{Path(archive_path).name}")
        return {
            "protest_letter_link": letter_link,
            "zip_package_link": zip_link,
            "folder_link": f"s3://{self.bucket_name}/{folder}/",
        }
