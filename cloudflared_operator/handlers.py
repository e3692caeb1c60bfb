import kopf
from kubernetes import config as kube_config

from cloudflared_operator import config
from cloudflared_operator.reconciler import Reconciler


def reconcile(name, namespace, logger):
    return Reconciler().reconcile(
        name=name,
        namespace=namespace,
        logger=logger,
        request_timeout=config.REQUEST_TIMEOUT
    )


def owned_by_cloudflared(meta, **_):
    """True when a CloudflaredDeployment is the controller of this object."""
    for ref in meta.get("ownerReferences", []):
        if (
            ref.get("controller")
            and ref.get("kind") == config.CLOUDFLARED_KIND
            and ref.get("apiVersion", "").startswith(f"{config.CLOUDFLARED_GROUP}/")
        ):
            return True
    return False


def controller_name(meta):
    for ref in meta.get("ownerReferences", []):
        if ref.get("controller") and ref.get("kind") == config.CLOUDFLARED_KIND:
            return ref.get("name")
    return None


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_):
    try:
        kube_config.load_incluster_config()
    except kube_config.ConfigException:
        kube_config.load_kube_config()

    settings.batching.worker_limit = config.WORKER_LIMIT
    settings.posting.enabled = config.POSTING_ENABLED
    settings.networking.request_timeout = config.REQUEST_TIMEOUT


@kopf.on.create(config.CLOUDFLARED_GROUP, config.CLOUDFLARED_API_VERSION, config.CLOUDFLARED_PLURAL)
@kopf.on.update(config.CLOUDFLARED_GROUP, config.CLOUDFLARED_API_VERSION, config.CLOUDFLARED_PLURAL)
@kopf.on.resume(config.CLOUDFLARED_GROUP, config.CLOUDFLARED_API_VERSION, config.CLOUDFLARED_PLURAL)
def reconcile_fn(name, namespace, logger, **kwargs):
    """
    Triggered when a CloudflaredDeployment is created, changed, or seen
    again after an operator restart.

    Make sure its DaemonSet or Deployment exists.
    """
    outcome = reconcile(name=name, namespace=namespace, logger=logger)
    logger.info(f"---> CloudflaredDeployment {namespace}/{name}: {outcome.value}")


def deleted_and_owned(type, meta, **_):
    return type == "DELETED" and owned_by_cloudflared(meta)


# watch workloads created for a CloudflaredDeployment
@kopf.on.event("apps", "v1", "daemonsets", when=deleted_and_owned)
@kopf.on.event("apps", "v1", "deployments", when=deleted_and_owned)
def owned_workload_deleted(meta, namespace, logger, **kwargs):
    """
    Triggered when a DaemonSet or Deployment controlled by a
    CloudflaredDeployment is removed from the cluster.

    Reconcile the owner so the workload is created again. An owner that is
    gone or being deleted ends the pass without creating anything.
    """
    owner = controller_name(meta)
    logger.info(f"---> {meta.get('name')} owned by CloudflaredDeployment {namespace}/{owner} was deleted")
    outcome = reconcile(name=owner, namespace=namespace, logger=logger)
    logger.info(f"---> CloudflaredDeployment {namespace}/{owner}: {outcome.value}")
