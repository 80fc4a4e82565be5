# Attachment (receipt / quote) rules for request submission
ALLOWED_CONTENT_TYPES = (
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'image/heic',
    'application/pdf',
)
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024
UPLOAD_SUBDIR = 'uploads'
