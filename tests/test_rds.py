from datetime import datetime, timedelta, timezone

import pytest

from cloudnuke.rds import (
    DBInstances,
    RdsDeleteError,
    get_all_rds_instances,
    nuke_all_rds_instances,
)


class FakeAwsError(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.response = {"Error": {"Code": code}}


class FakeWaiter:
    def __init__(self, client):
        self.client = client

    def wait(self, DBInstanceIdentifier):
        self.client.waited.append(DBInstanceIdentifier)
        if DBInstanceIdentifier in self.client.wait_failures:
            raise FakeAwsError("WaiterTimeout")


class FakeRdsClient:
    def __init__(self):
        self.instances = {}
        self.delete_calls = []
        self.waited = []
        self.delete_failures = set()
        self.wait_failures = set()
        self.waiter_names = []

    def create(self, name, created):
        # AWS stores instance identifiers in lower case.
        self.instances[name.lower()] = created

    def describe_db_instances(self):
        return {
            "DBInstances": [
                {"DBInstanceIdentifier": name, "InstanceCreateTime": created}
                for name, created in self.instances.items()
            ]
        }

    def delete_db_instance(self, DBInstanceIdentifier, SkipFinalSnapshot):
        self.delete_calls.append((DBInstanceIdentifier, SkipFinalSnapshot))
        if DBInstanceIdentifier in self.delete_failures:
            raise FakeAwsError("InvalidDBInstanceState")
        self.instances.pop(DBInstanceIdentifier.lower(), None)

    def get_waiter(self, name):
        self.waiter_names.append(name)
        return FakeWaiter(self)


class FakeSession:
    def __init__(self, client, region="eu-west-1"):
        self._client = client
        self.region_name = region
        self.services = []

    def client(self, service):
        self.services.append(service)
        return self._client


@pytest.fixture
def client():
    return FakeRdsClient()


@pytest.fixture
def session(client):
    return FakeSession(client)


def now():
    return datetime.now(timezone.utc)


def test_nuke_rds_instance(client, session):
    rds_name = "cloud-nuke-test-AbC123"
    exclude_after = now() + timedelta(hours=1)
    client.create(rds_name, now())

    instances = get_all_rds_instances(session, exclude_after)
    assert rds_name.lower() in instances

    nuke_all_rds_instances(session, [rds_name.lower()])
    assert rds_name.lower() not in get_all_rds_instances(session, exclude_after)


def test_list_excludes_recent_and_missing_create_time(client, session):
    client.create("old", now() - timedelta(days=2))
    client.create("new", now())
    client.instances["pending"] = None

    names = get_all_rds_instances(session, now() - timedelta(hours=1))

    assert names == ["old"]
    assert session.services == ["rds"]


def test_nuke_skips_final_snapshot_and_waits(client, session):
    client.create("a", now())
    client.create("b", now())

    deleted = nuke_all_rds_instances(session, ["a", "b"])

    assert deleted == ["a", "b"]
    assert client.delete_calls == [("a", True), ("b", True)]
    assert client.waiter_names == ["db_instance_deleted"]
    assert client.waited == ["a", "b"]


def test_nuke_empty_does_nothing(client, session):
    assert nuke_all_rds_instances(session, []) == []
    assert client.delete_calls == []
    assert client.waiter_names == []


def test_nuke_delete_failure_is_skipped(client, session):
    client.create("a", now())
    client.create("b", now())
    client.delete_failures.add("a")

    deleted = nuke_all_rds_instances(session, ["a", "b"])

    assert deleted == ["b"]
    assert client.waited == ["b"]
    assert "a" in client.instances


def test_nuke_all_failures_skip_waiting(client, session):
    client.delete_failures.add("a")

    assert nuke_all_rds_instances(session, ["a"]) == []
    assert client.waiter_names == []


def test_nuke_wait_failure_raises(client, session):
    client.create("a", now())
    client.create("b", now())
    client.wait_failures.add("a")

    with pytest.raises(FakeAwsError) as info:
        nuke_all_rds_instances(session, ["a", "b"])

    assert info.value.response["Error"]["Code"] == "WaiterTimeout"
    assert client.waited == ["a"]


def test_rds_delete_error_message():
    error = RdsDeleteError("mydb")
    assert str(error) == "RDS DB Instance:mydbwas not deleted"
    assert error.name == "mydb"


def test_db_instances_resource(client, session):
    client.create("x", now())
    resource = DBInstances(instance_names=["x"])

    assert resource.resource_name() == "rds"
    assert resource.resource_identifiers() == ["x"]
    assert resource.max_batch_size() == 200

    resource.nuke(session, ["x"])
    assert client.delete_calls == [("x", True)]
    assert client.instances == {}