from datetime import datetime, timedelta, timezone

from cloudnuke.launch_config import (
    LaunchConfigs,
    get_all_launch_configurations,
    nuke_all_launch_configurations,
)


class FakeError(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.response = {"Error": {"Code": code}}


class FakeAutoscaling:
    def __init__(self):
        self.configs = {}
        self.fail = set()

    def add(self, name, created):
        self.configs[name] = {"LaunchConfigurationName": name, "CreatedTime": created}

    def describe_launch_configurations(self, **kwargs):
        return {"LaunchConfigurations": list(self.configs.values())}

    def delete_launch_configuration(self, LaunchConfigurationName):
        if LaunchConfigurationName in self.fail or LaunchConfigurationName not in self.configs:
            raise FakeError("ValidationError")
        del self.configs[LaunchConfigurationName]


class FakeSession:
    region_name = "us-east-1"

    def __init__(self, client):
        self._client = client

    def client(self, name):
        assert name == "autoscaling"
        return self._client


def now():
    return datetime.now(timezone.utc)


def make():
    client = FakeAutoscaling()
    client.add("cloud-nuke-test-abc", now())
    return client, FakeSession(client)


def test_list_launch_configurations():
    client, session = make()
    older = get_all_launch_configurations(session, "us-east-1", now() - timedelta(hours=1))
    assert "cloud-nuke-test-abc" not in older
    newer = get_all_launch_configurations(session, "us-east-1", now() + timedelta(hours=1))
    assert "cloud-nuke-test-abc" in newer


def test_nuke_launch_configurations():
    client, session = make()
    deleted = nuke_all_launch_configurations(session, ["cloud-nuke-test-abc"])
    assert deleted == ["cloud-nuke-test-abc"]
    names = get_all_launch_configurations(session, "us-east-1", now() + timedelta(hours=1))
    assert "cloud-nuke-test-abc" not in names


def test_nuke_skips_failures():
    client, session = make()
    client.add("second", now())
    client.fail.add("cloud-nuke-test-abc")
    deleted = nuke_all_launch_configurations(session, ["cloud-nuke-test-abc", "second"])
    assert deleted == ["second"]
    assert list(client.configs) == ["cloud-nuke-test-abc"]


def test_nuke_nothing():
    client, session = make()
    assert nuke_all_launch_configurations(session, []) == []
    assert "cloud-nuke-test-abc" in client.configs


def test_resource_type():
    configs = LaunchConfigs(["a", "b"])
    assert configs.resource_name() == "lc"
    assert configs.resource_identifiers() == ["a", "b"]
    assert configs.max_batch_size() == 200


def test_resource_nuke():
    client, session = make()
    LaunchConfigs(["cloud-nuke-test-abc"]).nuke(session, ["cloud-nuke-test-abc"])
    names = get_all_launch_configurations(session, "us-east-1", now() + timedelta(hours=1))
    assert names == []