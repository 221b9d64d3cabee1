from dataclasses import dataclass, field
from enum import Enum
from cloudwatch_auto.errorlib import ProgrammingInvariantViolation


class Family(str, Enum):
    """
    The closed set of monitored resource families.

    Member order is the fixed processing order used by generation and apply,
    and the values are the keys of the persisted alarm file.
    """
    EC2 = "EC2"
    RDS = "RDS"
    ELB = "ELB"
    REDSHIFT = "Redshift"


FAMILY_ORDER: tuple[Family, ...] = tuple(Family)


@dataclass(frozen=True)
class Ec2Instance:
    """An EC2 instance as returned by ``describe_instances`` (tags inline)."""
    instance_id: str
    tags: list = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict) -> "Ec2Instance":
        if not data.get("InstanceId"):
            raise ProgrammingInvariantViolation("Missing instance id on EC2 instance.")
        return cls(instance_id=data["InstanceId"], tags=data.get("Tags") or [])


@dataclass(frozen=True)
class DbInstance:
    """An RDS DB instance. Tags come from a separate ``list_tags_for_resource`` call."""
    identifier: str
    arn: str
    tags: list = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict, tags: list | None = None) -> "DbInstance":
        if not data.get("DBInstanceArn"):
            raise ProgrammingInvariantViolation("Missing DB instance ARN on RDS instance.")
        if not data.get("DBInstanceIdentifier"):
            raise ProgrammingInvariantViolation(f"Missing identifier on RDS instance {data['DBInstanceArn']}.")
        return cls(identifier=data["DBInstanceIdentifier"], arn=data["DBInstanceArn"], tags=tags or [])


@dataclass(frozen=True)
class LoadBalancer:
    """An ELBv2 load balancer. Tags come from batched ``describe_tags`` calls."""
    arn: str
    tags: list = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict, tags: list | None = None) -> "LoadBalancer":
        if not data.get("LoadBalancerArn"):
            raise ProgrammingInvariantViolation("Missing load balancer ARN.")
        return cls(arn=data["LoadBalancerArn"], tags=tags or [])

    @property
    def dimension(self) -> str:
        """
        The CloudWatch ``LoadBalancer`` dimension value, e.g. ``app/my-lb/50dc6c495c0c9188``.

        Raises:
            ProgrammingInvariantViolation: If the ARN has no resource part.
        """
        name = self.arn.split(":")[-1]
        if not name:
            raise ProgrammingInvariantViolation(f"Missing name in load balancer ARN {self.arn}.")
        return name.replace("loadbalancer/", "", 1)


@dataclass(frozen=True)
class LoadBalancerWithStatistics:
    """A load balancer paired with its trailing 24 hour metric samples."""
    load_balancer: LoadBalancer
    target_response_times: list = field(default_factory=list)
    request_counts: list = field(default_factory=list)


@dataclass(frozen=True)
class RedshiftCluster:
    """A Redshift cluster as returned by ``describe_clusters`` (tags inline)."""
    identifier: str
    tags: list = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict) -> "RedshiftCluster":
        if not data.get("ClusterIdentifier"):
            raise ProgrammingInvariantViolation("Missing cluster identifier on Redshift cluster.")
        return cls(identifier=data["ClusterIdentifier"], tags=data.get("Tags") or [])

    def arn(self, region: str, account_id: str) -> str:
        # describe_clusters does not return the ARN, tagging needs it
        return f"arn:aws:redshift:{region}:{account_id}:cluster:{self.identifier}"
