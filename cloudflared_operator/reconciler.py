import enum
import logging
from typing import NamedTuple

import kopf
from kubernetes import client
from urllib3.exceptions import HTTPError

from cloudflared_operator import config
from cloudflared_operator.workloads import (
    DAEMON_SET,
    DEFAULT_LABELS,
    DEPLOYMENT,
    derive,
    resolve_kind,
)


NOT_FOUND = 404
CONFLICT = 409


class Outcome(str, enum.Enum):
    GONE = "gone"
    INVALID_KIND = "invalid-kind"
    UP_TO_DATE = "up-to-date"
    CREATED = "created"
    ALREADY_EXISTS = "already-exists"


class WorkloadKind(NamedTuple):
    """How to probe for and create one kind of workload with AppsV1Api."""
    kind: str
    read: str
    create: str

    def probe(self, api, name, namespace, **kwargs):
        return getattr(api, self.read)(name=name, namespace=namespace, **kwargs)

    def submit(self, api, namespace, body, **kwargs):
        return getattr(api, self.create)(namespace=namespace, body=body, **kwargs)


WORKLOAD_KINDS = {
    DAEMON_SET: WorkloadKind(DAEMON_SET, "read_namespaced_daemon_set", "create_namespaced_daemon_set"),
    DEPLOYMENT: WorkloadKind(DEPLOYMENT, "read_namespaced_deployment", "create_namespaced_deployment"),
}


class Reconciler:
    """
    Create the DaemonSet or Deployment a CloudflaredDeployment asks for.

    The reconciler keeps no state between passes. A pass only ever creates a
    missing workload; an existing one is left untouched. Failures other than
    "not found" are raised as kopf.TemporaryError so kopf can retry later.
    """

    def __init__(self, apps_api=None, custom_api=None, image=config.CLOUDFLARED_IMAGE,
                 app_name=config.APP_NAME, labels=None, retry_delay=config.RETRY_DELAY):
        self.apps_api = apps_api or client.AppsV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()
        self.image = image
        self.app_name = app_name
        self.labels = dict(labels if labels is not None else DEFAULT_LABELS)
        self.retry_delay = retry_delay

    def reconcile(self, name, namespace, logger=None, request_timeout=None):
        logger = logger or logging.getLogger(__name__)
        kwargs = {}
        if request_timeout is not None:
            kwargs["_request_timeout"] = request_timeout

        try:
            body = self.custom_api.get_namespaced_custom_object(
                group=config.CLOUDFLARED_GROUP, version=config.CLOUDFLARED_API_VERSION,
                namespace=namespace, plural=config.CLOUDFLARED_PLURAL, name=name, **kwargs
            )
        except client.exceptions.ApiException as e:
            if e.status == NOT_FOUND:
                logger.info(f"---> CloudflaredDeployment {namespace}/{name} is gone, nothing to do")
                return Outcome.GONE
            logger.error(f"---> Failed to get CloudflaredDeployment {namespace}/{name}: {e}")
            raise self._retry(f"Failed to get CloudflaredDeployment {namespace}/{name}") from e
        except HTTPError as e:
            logger.error(f"---> Failed to reach the API for CloudflaredDeployment {namespace}/{name}: {e}")
            raise self._retry(f"Failed to get CloudflaredDeployment {namespace}/{name}") from e

        if body.get("metadata", {}).get("deletionTimestamp"):
            logger.info(f"---> CloudflaredDeployment {namespace}/{name} is being deleted, nothing to do")
            return Outcome.GONE

        kind = resolve_kind(body.get("spec"))
        if kind is None:
            logger.info(f"---> Invalid CloudflaredDeployment kind {(body.get('spec') or {}).get('kind')!r} for {namespace}/{name}")
            return Outcome.INVALID_KIND

        workload = WORKLOAD_KINDS[kind]
        try:
            workload.probe(self.apps_api, name, namespace, **kwargs)
        except client.exceptions.ApiException as e:
            if e.status != NOT_FOUND:
                logger.error(f"---> Failed to get {kind} {namespace}/{name}: {e}")
                raise self._retry(f"Failed to get {kind} {namespace}/{name}") from e
        except HTTPError as e:
            logger.error(f"---> Failed to reach the API for {kind} {namespace}/{name}: {e}")
            raise self._retry(f"Failed to get {kind} {namespace}/{name}") from e
        else:
            logger.info(f"---> {kind} {namespace}/{name} up to date")
            return Outcome.UP_TO_DATE

        app = derive(body, kind, self.image, app_name=self.app_name, labels=self.labels)
        kopf.append_owner_reference(app, owner=body)

        try:
            workload.submit(self.apps_api, namespace, app, **kwargs)
        except client.exceptions.ApiException as e:
            if e.status == CONFLICT:
                logger.info(f"---> {kind} {namespace}/{name} already exists")
                return Outcome.ALREADY_EXISTS
            logger.error(f"---> Failed to create {kind} {namespace}/{name}: {e}")
            raise self._retry(f"Failed to create {kind} {namespace}/{name}") from e
        except HTTPError as e:
            logger.error(f"---> Failed to reach the API to create {kind} {namespace}/{name}: {e}")
            raise self._retry(f"Failed to create {kind} {namespace}/{name}") from e

        logger.info(f"---> Created {kind} {namespace}/{name}")
        return Outcome.CREATED

    def _retry(self, message):
        return kopf.TemporaryError(message, delay=self.retry_delay)
