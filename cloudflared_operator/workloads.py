"""
CloudflaredDeployment records and the workloads derived from them.

A CloudflaredDeployment asks for cloudflared to run either on every node
(``kind: DaemonSet``) or as a replicated pool (``kind: Deployment``). The
functions here turn such a record into the body of the matching ``apps/v1``
object. They only read the record; nothing here talks to the cluster.
"""
import copy

from cloudflared_operator.config import APP_NAME


DAEMON_SET = "DaemonSet"
DEPLOYMENT = "Deployment"
KINDS = (DAEMON_SET, DEPLOYMENT)

DEFAULT_LABELS = {"app": APP_NAME}


def resolve_kind(spec):
    """
    Return the workload kind requested by a CloudflaredDeployment spec.

    An empty or missing kind means DaemonSet. Anything that is not one of
    the two known kinds is invalid and yields None.
    """
    kind = (spec or {}).get("kind") or DAEMON_SET
    if kind not in KINDS:
        return None
    return kind


def pod_template(template, image, app_name=APP_NAME, labels=None):
    """
    Build the pod template for a workload.

    The default is one container named after the app running ``image`` and
    labelled with the default labels. An override replaces the labels and the
    container list as whole values; they are never merged with the defaults.
    """
    labels = copy.deepcopy(labels if labels is not None else DEFAULT_LABELS)
    containers = [{"name": app_name, "image": image}]

    if template is not None:
        override_labels = (template.get("metadata") or {}).get("labels")
        if override_labels:
            labels = copy.deepcopy(dict(override_labels))
        override_containers = (template.get("spec") or {}).get("containers")
        if override_containers:
            containers = copy.deepcopy(list(override_containers))

    return {
        "metadata": {"labels": labels},
        "spec": {"containers": containers},
    }


def derive(body, kind, image, app_name=APP_NAME, labels=None):
    metadata = body.get("metadata") or {}
    spec = body.get("spec") or {}

    template = pod_template(spec.get("template"), image, app_name=app_name, labels=labels)

    return {
        "apiVersion": "apps/v1",
        "kind": kind,
        "metadata": {
            "name": metadata.get("name"),
            "namespace": metadata.get("namespace"),
        },
        "spec": {
            "selector": {"matchLabels": dict(template["metadata"]["labels"])},
            "template": template,
        },
    }


def to_daemon_set(body, image, **kwargs):
    return derive(body, DAEMON_SET, image, **kwargs)


def to_deployment(body, image, **kwargs):
    return derive(body, DEPLOYMENT, image, **kwargs)
