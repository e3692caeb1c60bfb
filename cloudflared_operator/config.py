import os


def _flag(value):
    return value.strip().lower() in ("1", "true", "yes", "on")


CLOUDFLARED_IMAGE = os.getenv("CLOUDFLARED_IMAGE", "docker.io/cloudflare/cloudflared:latest")
APP_NAME = os.getenv("APP_NAME", "cloudflared")

# seconds
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))
RETRY_DELAY = float(os.getenv("RETRY_DELAY", "10"))

WORKER_LIMIT = int(os.getenv("WORKER_LIMIT", "5"))
POSTING_ENABLED = _flag(os.getenv("POSTING_ENABLED", "true"))

CLOUDFLARED_GROUP = "cloudflare.cloudflare.unmango.net"
CLOUDFLARED_API_VERSION = "v1alpha1"
CLOUDFLARED_PLURAL = "cloudflareddeployments"
CLOUDFLARED_KIND = "CloudflaredDeployment"
