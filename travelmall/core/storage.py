"""
Image storage for products, banners, hero slides and logos.
Uploads to Azure Blob Storage when a connection string is configured,
otherwise saves through Django's default storage (MEDIA_ROOT).
"""
import logging
import os
import uuid
from typing import Optional
from urllib.parse import quote

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings
from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB


class ImageUploadError(Exception):
    """Raised when an uploaded image is rejected or cannot be stored"""


def build_image_name(folder: str, filename: str) -> str:
    """Unique storage name: {folder}/{uuid}{ext}"""
    ext = os.path.splitext(filename or '')[1].lower()
    folder = folder.strip('/')
    return f"{folder}/{uuid.uuid4().hex}{ext}"


def validate_image(uploaded_file):
    ext = os.path.splitext(uploaded_file.name or '')[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ImageUploadError(f'Unsupported image type: {ext or "unknown"}')
    if uploaded_file.size and uploaded_file.size > MAX_IMAGE_SIZE:
        raise ImageUploadError('Image is larger than 10MB')

    try:
        with Image.open(uploaded_file) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ImageUploadError('File is not a valid image') from e
    finally:
        uploaded_file.seek(0)


def _upload_to_azure(uploaded_file, blob_name: str) -> str:
    blob_service_client = BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)
    blob_client = blob_service_client.get_blob_client(
        container=settings.AZURE_STORAGE_CONTAINER,
        blob=blob_name
    )
    content_type = getattr(uploaded_file, 'content_type', None) or 'application/octet-stream'
    blob_client.upload_blob(
        uploaded_file.read(),
        overwrite=True,
        content_settings=ContentSettings(content_type=content_type)
    )
    return blob_client.url


def upload_image(uploaded_file, folder: str) -> str:
    """
    Store an uploaded image and return its public URL.

    Args:
        uploaded_file: Django UploadedFile
        folder: Logical folder (e.g., 'products/12', 'banners')

    Returns:
        URL of the stored image

    Raises:
        ImageUploadError: if the file is rejected or storage fails
    """
    validate_image(uploaded_file)
    name = build_image_name(folder, uploaded_file.name)

    try:
        if getattr(settings, 'AZURE_STORAGE_CONNECTION_STRING', ''):
            url = _upload_to_azure(uploaded_file, name)
        else:
            saved_name = default_storage.save(name, uploaded_file)
            url = default_storage.url(saved_name)
    except Exception as e:
        logger.error(f"Failed to upload image to {folder}: {str(e)}")
        raise ImageUploadError('Image upload failed') from e

    logger.info(f"Uploaded image {name}")
    return url


def delete_image(url: Optional[str]) -> bool:
    """
    Best-effort removal of a previously uploaded image.

    Returns:
        True if deleted or nothing to delete, False on failure
    """
    if not url:
        return True

    try:
        if getattr(settings, 'AZURE_STORAGE_CONNECTION_STRING', ''):
            container = settings.AZURE_STORAGE_CONTAINER
            marker = f"/{container}/"
            if marker not in url:
                return True
            blob_name = url.split(marker, 1)[1].split('?', 1)[0]
            blob_service_client = BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)
            try:
                blob_service_client.get_blob_client(container=container, blob=blob_name).delete_blob()
            except ResourceNotFoundError:
                pass
            return True

        media_url = settings.MEDIA_URL
        if media_url and url.startswith(media_url):
            name = url[len(media_url):]
            if default_storage.exists(name):
                default_storage.delete(name)
        return True
    except Exception as e:
        logger.warning(f"Failed to delete image {quote(url)}: {str(e)}")
        return False
