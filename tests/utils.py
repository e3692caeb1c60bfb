"""
Shared helpers for cloudflared operator tests
"""

import copy

from kubernetes import client


def api_exception(status, reason=None):
    return client.exceptions.ApiException(status=status, reason=reason)


class FakeAppsApi:
    """In-memory stand-in for AppsV1Api that records every write."""

    def __init__(self):
        self.objects = {}
        self.created = []
        self.read_error = None
        self.create_error = None

    def _read(self, kind, name, namespace, **kwargs):
        if self.read_error is not None:
            raise self.read_error
        try:
            return self.objects[(kind, namespace, name)]
        except KeyError:
            raise api_exception(404, "Not Found")

    def _create(self, kind, namespace, body, **kwargs):
        if self.create_error is not None:
            raise self.create_error
        key = (kind, namespace, body["metadata"]["name"])
        if key in self.objects:
            raise api_exception(409, "AlreadyExists")
        self.created.append(body)
        self.objects[key] = copy.deepcopy(body)
        return body

    def read_namespaced_daemon_set(self, name, namespace, **kwargs):
        return self._read("DaemonSet", name, namespace, **kwargs)

    def read_namespaced_deployment(self, name, namespace, **kwargs):
        return self._read("Deployment", name, namespace, **kwargs)

    def create_namespaced_daemon_set(self, namespace, body, **kwargs):
        return self._create("DaemonSet", namespace, body, **kwargs)

    def create_namespaced_deployment(self, namespace, body, **kwargs):
        return self._create("Deployment", namespace, body, **kwargs)


def make_body(name="test-resource", namespace="default", uid="0a1b2c3d", spec=None):
    return {
        "apiVersion": "cloudflare.cloudflare.unmango.net/v1alpha1",
        "kind": "CloudflaredDeployment",
        "metadata": {"name": name, "namespace": namespace, "uid": uid},
        "spec": spec if spec is not None else {},
    }

