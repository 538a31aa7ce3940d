SERVICE_NAME = "uploader"
