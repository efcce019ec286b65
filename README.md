# cloudnuke

A library for finding and deleting AWS resources that were created before a
given point in time.

## Modules

Each kind of resource has its own module, with a function that lists the
identifiers of resources older than a cutoff and a function that deletes them:

| Module | Listing | Deleting | Resource class |
| --- | --- | --- | --- |
| `cloudnuke.eip` | `get_all_eip_addresses(session, region, exclude_after)` | `nuke_all_eip_addresses(session, allocation_ids)` | `EIPAddresses` |
| `cloudnuke.eks` | `get_all_eks_clusters(session, exclude_after)` | `nuke_all_eks_clusters(session, cluster_names)` | `EKSClusters` |
| `cloudnuke.elb` | `get_all_elb_instances(session, region, exclude_after)` | `nuke_all_elb_instances(session, names)` | `LoadBalancers` |
| `cloudnuke.elbv2` | `get_all_elbv2_instances(session, region, exclude_after)` | `nuke_all_elbv2_instances(session, arns)` | `LoadBalancersV2` |
| `cloudnuke.iam` | `get_all_iam_users(session, exclude_after, name_filter=None)` | `nuke_all_iam_users(session, user_names)` | `IAMUsers` |
| `cloudnuke.lambda_functions` | `get_all_lambda_functions(session, exclude_after)` | `nuke_all_lambda_functions(session, names)` | `LambdaFunctions` |
| `cloudnuke.launch_config` | `get_all_launch_configurations(session, region, exclude_after)` | `nuke_all_launch_configurations(session, config_names)` | `LaunchConfigs` |
| `cloudnuke.nat_gateway` | `get_all_nat_gateways(session, exclude_after, name_filter=None)` | `nuke_all_nat_gateways(session, identifiers)` | `NatGateways` |
| `cloudnuke.rds` | `get_all_rds_instances(session, exclude_after)` | `nuke_all_rds_instances(session, names)` | `DBInstances` |
| `cloudnuke.rds_cluster` | `get_all_rds_clusters(session, exclude_after)` | `nuke_all_rds_clusters(session, names)` | `DBClusters` |

The `nuke_all_*` functions return the list of identifiers that were deleted.

Every resource class is a dataclass holding a list of identifiers and
implements the `AwsResource` interface from `cloudnuke.common`:

- `resource_name()` returns a short name: `"eip"`, `"ekscluster"`, `"elb"`,
  `"elbv2"`, `"iam"`, `"lambda"`, `"lc"`, `"nat-gateway"` or `"rds"`.
- `resource_identifiers()` returns the identifiers it holds.
- `max_batch_size()` returns how many identifiers to pass per call (200, or 10
  for NAT gateways).
- `nuke(session, identifiers)` deletes the given resources.

`cloudnuke.common` also provides `do_with_retry`, `FatalError`, `MultiError`,
`error_code` and `region_of`.

## Sessions and clients

The functions take a *session*: any object with a `region_name` attribute and
a `client(service_name)` method, such as a boto3 session. Clients are called
with the AWS operation names in snake case (`describe_load_balancers`,
`delete_cluster`, ...), and waiters and paginators are obtained through
`get_waiter` and `get_paginator`. AWS error codes are read from an exception's
`response["Error"]["Code"]` or its `code` attribute.

The cutoff `exclude_after` is compared with the creation times the API
returns, so pass a timezone-aware `datetime`.

## Example

```python
from datetime import datetime, timedelta, timezone

from cloudnuke.elb import LoadBalancers, get_all_elb_instances

cutoff = datetime.now(timezone.utc) - timedelta(hours=1)
names = get_all_elb_instances(session, session.region_name, cutoff)

resource = LoadBalancers(names)
batch = resource.max_batch_size()
for start in range(0, len(names), batch):
    resource.nuke(session, names[start:start + batch])
```

## Behaviour worth knowing

- Elastic IPs do not report a creation time. An address without a
  `cloud-nuke-first-seen` tag is tagged with the current UTC time, and that
  tag is compared with the cutoff from then on.
- EKS clusters, classic and v2 load balancers, RDS instances and RDS clusters
  are waited on until AWS reports them gone. A classic load balancer still
  present after 30 one-second polls raises `ElbDeleteError`; an RDS cluster
  still present after 90 ten-second polls raises `RdsDeleteError`.
- Failed individual deletions are logged and skipped, except for IAM users
  and NAT gateways, where the failures are collected and raised together as a
  `MultiError`.
- IAM users are stripped of managed and inline policies, group memberships,
  login profile, access keys, signing certificates, SSH keys, service-specific
  credentials (Cassandra and CodeCommit) and MFA devices before the user is
  deleted.
- NAT gateways are deleted concurrently, one thread per gateway. More than 100
  in one call raises `TooManyNatError`. Deletion is then polled for up to 30
  tries, 10 seconds apart.
- `name_filter` is an optional callable taking a name and returning whether
  to include it; for NAT gateways the name is the `Name` tag.
- `eks_supported_region(region)` tells whether a region is in the package's
  list of EKS regions.
- Progress is reported through the standard `logging` module under the
  `cloudnuke` logger.

## What this package does not do

There is no command-line tool. The package does not create sessions, look up
credentials or enumerate regions, does not read a configuration file of
include or exclude rules, and does not batch identifiers for you: the caller
lists, batches and calls `nuke`.

## Installation and tests

```
pip install .
pip install ".[test]"
pytest
```