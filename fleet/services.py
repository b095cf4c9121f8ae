"""
Storage of driver documents under MEDIA_ROOT/uploads/documents
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.storage import FileSystemStorage
from django.template.defaultfilters import filesizeformat
from django.utils.text import get_valid_filename
from PIL import Image
import os
import random
import time
import logging

logger = logging.getLogger(__name__)


ALLOWED_DOCUMENT_EXTENSIONS = ['.pdf', '.jpg', '.jpeg', '.png', '.doc', '.docx']
IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png']
DOCUMENT_FIELDS = ['id_proof', 'work_permit']
DOCUMENTS_URL_PREFIX = '/uploads/documents/'


class DocumentStorageService:
    """Validation, naming and lookup of uploaded driver documents"""

    @staticmethod
    def documents_root():
        return os.path.join(settings.MEDIA_ROOT, settings.UPLOAD_DOCUMENTS_DIR)

    @classmethod
    def storage(cls):
        return FileSystemStorage(location=cls.documents_root(), base_url=DOCUMENTS_URL_PREFIX)

    @staticmethod
    def validate(uploaded_file):
        """
        Check type, size and, for images, that the file decodes

        Raises:
            ValidationError: with a user facing message
        """
        ext = os.path.splitext(uploaded_file.name)[1].lower()
        if ext not in ALLOWED_DOCUMENT_EXTENSIONS:
            raise ValidationError('Invalid file type. Only PDF, JPG, PNG and Word documents are allowed')

        max_size = settings.UPLOAD_MAX_FILE_SIZE
        if uploaded_file.size > max_size:
            raise ValidationError(f'File is too large. Maximum size: {filesizeformat(max_size)}')

        if ext in IMAGE_EXTENSIONS:
            try:
                img = Image.open(uploaded_file)
                img.verify()
            except Exception as e:
                raise ValidationError(f'File is not a valid image: {e}')
            finally:
                uploaded_file.seek(0)

        return uploaded_file

    @staticmethod
    def unique_filename(original_name):
        """<name>-<timestamp ms>-<random><ext>"""
        base, ext = os.path.splitext(os.path.basename(original_name))
        base = get_valid_filename(base) or 'document'
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
        return f"{base}-{suffix}{ext.lower()}"

    @classmethod
    def save(cls, uploaded_file):
        """Store a validated file and return its public URL"""
        storage = cls.storage()
        name = storage.save(cls.unique_filename(uploaded_file.name), uploaded_file)
        logger.info(f"Stored document {name} ({uploaded_file.size} bytes)")
        return storage.url(name)

    @classmethod
    def resolve(cls, filename):
        """
        Absolute path of a stored document

        Returns None for names that are not plain file names or that do not
        exist in the documents directory.
        """
        if not filename or filename != os.path.basename(filename) or filename in ('.', '..'):
            return None

        root = os.path.realpath(cls.documents_root())
        path = os.path.realpath(os.path.join(root, filename))
        if os.path.dirname(path) != root or not os.path.isfile(path):
            return None
        return path

    @classmethod
    def discard(cls, url):
        """Delete a document stored by save(), given its public URL"""
        filename = url[len(DOCUMENTS_URL_PREFIX):] if url.startswith(DOCUMENTS_URL_PREFIX) else ''
        if cls.resolve(filename) is None:
            return
        cls.storage().delete(filename)
        logger.info(f"Discarded document {filename}")
