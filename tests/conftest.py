import dataclasses

import pytest

from kubefdb.client.pod_client import PodFactsClient
from kubefdb.core.models import (
    NONE_FAULT_DOMAIN_KEY,
    ClusterSpec,
    ClusterStatus,
    FaultDomain,
    FoundationDBCluster,
    PodFacts,
    RequiredAddresses,
)

CLUSTER_NAME = "operator-test"
CONNECTION_STRING = "operator-test:asdfasf@127.0.0.1:4501"
POD_IP = "1.1.0.1"
SERVICE_IP = "192.168.0.1"

MANIFEST = """\
apiVersion: apps.foundationdb.org/v1beta1
kind: FoundationDBCluster
metadata:
  name: operator-test
spec:
  version: 6.2.20
  faultDomain:
    key: foundationdb.org/none
  processes:
    general:
      customParameters:
        - knob_disable_posix_kernel_aio = 1
status:
  connectionString: operator-test:asdfasf@127.0.0.1:4501
  requiredAddresses:
    nonTLS: true
"""


def with_spec(cluster: FoundationDBCluster, **changes) -> FoundationDBCluster:
    return dataclasses.replace(cluster, spec=dataclasses.replace(cluster.spec, **changes))


def with_status(cluster: FoundationDBCluster, **changes) -> FoundationDBCluster:
    return dataclasses.replace(cluster, status=dataclasses.replace(cluster.status, **changes))


@pytest.fixture
def cluster():
    """A default cluster with host replication disabled and a connection string."""
    return FoundationDBCluster(
        name=CLUSTER_NAME,
        spec=ClusterSpec(fault_domain=FaultDomain(key=NONE_FAULT_DOMAIN_KEY)),
        status=ClusterStatus(
            connection_string=CONNECTION_STRING,
            required_addresses=RequiredAddresses(non_tls=True),
        ),
    )


@pytest.fixture
def pod():
    return PodFacts(process_group_id="storage-1", pod_ip=POD_IP, service_ip=SERVICE_IP)


@pytest.fixture
def client(cluster, pod):
    return PodFactsClient(cluster, pod)


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text(MANIFEST, encoding="utf-8")
    return path
