"""
Monitor configuration builder: argument order, placeholder state,
addresses across TLS migrations, knobs and localities.
"""

import pytest

from conftest import with_spec, with_status
from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import (
    FaultDomain,
    MainContainerSettings,
    ProcessClass,
    ProcessSettings,
    PublicIPSource,
    RequiredAddresses,
    RoutingSettings,
)
from kubefdb.core.versions import Versions
from kubefdb.monitor.arguments import EnvironmentReference, Literal, ProcessNumberComputed, concat
from kubefdb.monitor.conf import MonitorConfBuilder

BASE_ARGUMENT_LENGTH = 10


def public_address(*ports):
    parts = []
    for index, (offset, tls) in enumerate(ports):
        parts += ["--public_address=[" if index == 0 else ",[",
                  EnvironmentReference("FDB_PUBLIC_IP"), "]:", ProcessNumberComputed(offset, 2)]
        if tls:
            parts.append(":tls")
    return concat(*parts)


@pytest.fixture
def builder():
    return MonitorConfBuilder()


def test_placeholder_without_connection_string(builder, cluster):
    cluster = with_status(cluster, connection_string="")
    for process_class in (ProcessClass.STORAGE, ProcessClass.LOG):
        for count in (1, 3):
            conf = builder.build(cluster, process_class, count)
            assert conf.server_count == 0
            assert conf.version == str(Versions.DEFAULT)
            assert conf.arguments == ()


def test_storage_instance(builder, cluster):
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)

    assert conf.version == str(Versions.DEFAULT)
    assert conf.binary_path == ""
    assert conf.server_count == 1
    assert list(conf.arguments) == [
        Literal("--cluster_file=/var/fdb/data/fdb.cluster"),
        Literal("--seed_cluster_file=/var/dynamic-conf/fdb.cluster"),
        public_address((4499, False)),
        Literal("--class=storage"),
        Literal("--logdir=/var/log/fdb-trace-logs"),
        Literal("--loggroup=operator-test"),
        Literal("--datadir=/var/fdb/data"),
        concat("--locality_instance_id=", EnvironmentReference("FDB_INSTANCE_ID")),
        concat("--locality_machineid=", EnvironmentReference("FDB_MACHINE_ID")),
        concat("--locality_zoneid=", EnvironmentReference("FDB_ZONE_ID")),
    ]


def test_class_accepts_plain_strings(builder, cluster):
    assert builder.build(cluster, "stateless", 1).arguments[3] == Literal("--class=stateless")


def test_multiple_processes_use_numbered_data_directory(builder, cluster):
    conf = builder.build(cluster, ProcessClass.STORAGE, 2)
    assert conf.server_count == 2
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[6] == concat("--datadir=/var/fdb/data/", ProcessNumberComputed())


def test_pod_public_ip_has_no_listen_address(builder, cluster):
    cluster = with_spec(cluster, routing=RoutingSettings(PublicIPSource.POD))
    cluster = with_status(cluster, has_listen_ips_for_all_pods=True)
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[2] == public_address((4499, False))


def test_service_public_ip_adds_listen_address(builder, cluster):
    cluster = with_spec(cluster, routing=RoutingSettings(PublicIPSource.SERVICE))
    cluster = with_status(cluster, has_listen_ips_for_all_pods=True)
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)

    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[2] == public_address((4499, False))
    assert conf.arguments[10] == concat(
        "--listen_address=[", EnvironmentReference("FDB_POD_IP"), "]:", ProcessNumberComputed(4499, 2))


def test_service_public_ip_without_listen_variables(builder, cluster):
    cluster = with_spec(cluster, routing=RoutingSettings(PublicIPSource.SERVICE))
    cluster = with_status(cluster, has_listen_ips_for_all_pods=False)
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH


def test_tls_only(builder, cluster):
    cluster = with_spec(cluster, main_container=MainContainerSettings(enable_tls=True))
    cluster = with_status(cluster, required_addresses=RequiredAddresses(tls=True, non_tls=False))
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[2] == public_address((4498, True))


@pytest.mark.parametrize("enable_tls", [True, False])
def test_tls_transition_lists_both_addresses(builder, cluster, enable_tls):
    # The same addresses are required whichever direction the migration runs
    cluster = with_spec(cluster, main_container=MainContainerSettings(enable_tls=enable_tls))
    cluster = with_status(cluster, required_addresses=RequiredAddresses(tls=True, non_tls=True))
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[2] == public_address((4498, True), (4499, False))


def test_no_required_addresses_means_plain(builder, cluster):
    cluster = with_status(cluster, required_addresses=RequiredAddresses())
    assert builder.build(cluster, ProcessClass.STORAGE, 1).arguments[2] == public_address((4499, False))


def test_general_custom_parameters(builder, cluster):
    cluster = with_spec(cluster, processes={
        ProcessClass.GENERAL: ProcessSettings(("knob_disable_posix_kernel_aio = 1",)),
    })
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[10] == Literal("--knob_disable_posix_kernel_aio=1")


def test_class_custom_parameters_replace_general(builder, cluster):
    cluster = with_spec(cluster, processes={
        ProcessClass.GENERAL: ProcessSettings(("knob_disable_posix_kernel_aio = 1",)),
        ProcessClass.STORAGE: ProcessSettings(("knob_test = test1",)),
        ProcessClass.STATELESS: ProcessSettings(("knob_test = test2",)),
    })
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[10] == Literal("--knob_test=test1")


def test_invalid_custom_parameter_aborts_build(builder, cluster):
    cluster = with_spec(cluster, processes={ProcessClass.GENERAL: ProcessSettings(("knob_without_value",))})
    with pytest.raises(ConfigurationError):
        builder.build(cluster, ProcessClass.STORAGE, 1)


def test_fault_domain_variable_becomes_zone(builder, cluster):
    cluster = with_spec(cluster, fault_domain=FaultDomain(key="rack", value_from="$RACK"))
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[9] == concat("--locality_zoneid=", EnvironmentReference("RACK"))


def test_peer_verification_rules(builder, cluster):
    cluster = with_spec(cluster, main_container=MainContainerSettings(peer_verification_rules="S.CN=foundationdb.org"))
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[10] == Literal("--tls_verify_peers=S.CN=foundationdb.org")


def test_custom_log_group(builder, cluster):
    cluster = with_spec(cluster, log_group="test-fdb-cluster")
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH
    assert conf.arguments[5] == Literal("--loggroup=test-fdb-cluster")


def test_data_center(builder, cluster):
    conf = builder.build(with_spec(cluster, data_center="dc01"), ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[10] == Literal("--locality_dcid=dc01")


def test_data_hall(builder, cluster):
    conf = builder.build(with_spec(cluster, data_hall="dh01"), ProcessClass.STORAGE, 1)
    assert len(conf.arguments) == BASE_ARGUMENT_LENGTH + 1
    assert conf.arguments[10] == Literal("--locality_data_hall=dh01")


def test_optional_arguments_keep_relative_order(builder, cluster):
    cluster = with_spec(
        cluster,
        data_center="dc01",
        data_hall="dh01",
        processes={ProcessClass.STORAGE: ProcessSettings(("knob_a=1", "knob_b = 2"))},
        main_container=MainContainerSettings(peer_verification_rules="S.CN=foundationdb.org"),
        routing=RoutingSettings(PublicIPSource.SERVICE),
    )
    cluster = with_status(cluster, has_listen_ips_for_all_pods=True)
    tail = builder.build(cluster, ProcessClass.STORAGE, 1).arguments[BASE_ARGUMENT_LENGTH:]

    assert tail[:5] == (
        Literal("--locality_dcid=dc01"),
        Literal("--locality_data_hall=dh01"),
        Literal("--knob_a=1"),
        Literal("--knob_b=2"),
        Literal("--tls_verify_peers=S.CN=foundationdb.org"),
    )
    assert tail[5].parts[0] == Literal("--listen_address=[")


def test_sidecar_binaries_fill_binary_path(builder, cluster):
    version = str(Versions.WITHOUT_BINARIES_FROM_MAIN_CONTAINER)
    cluster = with_status(with_spec(cluster, version=version), running_version=version)
    conf = builder.build(cluster, ProcessClass.STORAGE, 1)
    assert conf.binary_path == "/var/dynamic-conf/bin/6.2.11/fdbserver"
    assert conf.version == version


def test_builds_are_deterministic(builder, cluster):
    first = builder.build(cluster, ProcessClass.LOG, 2)
    second = MonitorConfBuilder().build(cluster, ProcessClass.LOG, 2)
    assert first == second


@pytest.mark.parametrize("count", [0, -1])
def test_invalid_process_count(builder, cluster, count):
    with pytest.raises(ConfigurationError):
        builder.build(cluster, ProcessClass.STORAGE, count)


def test_unknown_process_class(builder, cluster):
    with pytest.raises(ConfigurationError):
        builder.build(cluster, "archiver", 1)
