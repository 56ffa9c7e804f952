"""Pydantic models for the instance terminator configuration, AWS views and results."""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LifecycleState(str, Enum):
    """Auto Scaling instance lifecycle states."""
    PENDING = "Pending"
    PENDING_WAIT = "Pending:Wait"
    PENDING_PROCEED = "Pending:Proceed"
    QUARANTINED = "Quarantined"
    IN_SERVICE = "InService"
    TERMINATING = "Terminating"
    TERMINATING_WAIT = "Terminating:Wait"
    TERMINATING_PROCEED = "Terminating:Proceed"
    TERMINATED = "Terminated"
    DETACHING = "Detaching"
    DETACHED = "Detached"
    ENTERING_STANDBY = "EnteringStandby"
    STANDBY = "Standby"


class HealthStatus(str, Enum):
    """Auto Scaling instance health states."""
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"


class ResultKind(str, Enum):
    """Outcome recorded for an ASG or termination group."""
    TOO_FEW_INSTANCES = "too few instances in group"
    NOT_ENOUGH_HEALTHY = "not enough healthy instances in group"
    INSTANCE_TERMINATED = "instance terminated"
    WOULD_TERMINATE = "instance would be terminated"
    TERMINATION_FAILED = "termination failed"


class TerminatorConfig(BaseModel):
    """Main configuration model for the instance terminator."""
    model_config = ConfigDict(use_enum_values=True)

    eligibility_tag_key: str = Field(
        default="can-be-terminated", description="Tag key marking an ASG for rotation"
    )
    eligibility_tag_value: str = Field(
        default="true", description="Exact tag value that enables rotation"
    )
    group_tag_key: str = Field(
        default="instance-terminator-group",
        description="Tag key whose value joins ASGs into one termination group",
    )
    min_configured_size: int = Field(
        default=2, ge=1, description="Minimum desired capacity for an ASG to be considered"
    )
    min_healthy_instances: int = Field(
        default=2, ge=1, description="Minimum InService+Healthy instances for an ASG to be considered"
    )
    max_workers: int = Field(default=4, ge=1, description="Concurrent termination requests")
    dry_run: bool = Field(default=False, description="If true, only log actions without executing")


class AsgInstance(BaseModel):
    """An instance as reported by DescribeAutoScalingGroups."""
    instance_id: str
    lifecycle_state: str
    health_status: str

    @property
    def is_in_service_and_healthy(self) -> bool:
        return (
            self.lifecycle_state == LifecycleState.IN_SERVICE.value
            and self.health_status == HealthStatus.HEALTHY.value
        )


class AutoScalingGroup(BaseModel):
    """Model representing a described Auto Scaling Group."""
    name: str
    min_size: int = 0
    max_size: int = 0
    desired_capacity: int = 0
    instances: List[AsgInstance] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)


class TagInfo(BaseModel):
    """Rotation settings read from an ASG's tags."""
    eligible: bool
    group_name: Optional[str] = None


class ExplicitGroup(BaseModel):
    """Group named by the group tag; shared by every ASG carrying the same value."""
    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def label(self) -> Dict[str, str]:
        return {"instance_terminator_group_name": self.name}


class ImplicitGroup(BaseModel):
    """Group made of a single ASG that has no group tag."""
    model_config = ConfigDict(frozen=True)

    asg_name: str

    @property
    def label(self) -> Dict[str, str]:
        return {"autoscaling_group_name": self.asg_name}


GroupKey = Union[ExplicitGroup, ImplicitGroup]


class Candidate(BaseModel):
    """An instance that may be terminated, with the ASG it belongs to."""
    instance_id: str
    asg_name: str


class EligibilityResult(BaseModel):
    """Either the reason an ASG is skipped or the candidates it contributes.

    ``ignored`` marks ASGs with nothing to rotate; they are skipped without
    a report entry.
    """
    model_config = ConfigDict(use_enum_values=True)

    asg_name: str
    tag_info: TagInfo
    ignored: bool = False
    skip: Optional[ResultKind] = None
    candidates: List[Candidate] = Field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return not self.ignored and self.skip is None


class TerminationGroup(BaseModel):
    """All candidates sharing one termination budget."""
    key: GroupKey
    candidates: List[Candidate] = Field(default_factory=list)


class Selection(BaseModel):
    """The instance chosen for termination within a group."""
    key: GroupKey
    candidate: Candidate
    launch_time: datetime


class ResultEntry(BaseModel):
    """One line of the invocation report.

    Serialized with camelCase aliases and without unset fields, e.g.
    ``{"autoscalingGroupName": "my-asg", "result": "instance terminated",
    "instanceId": "i-123"}``.
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    autoscaling_group_name: Optional[str] = Field(default=None, alias="autoscalingGroupName")
    instance_terminator_group_name: Optional[str] = Field(
        default=None, alias="instanceTerminatorGroupName"
    )
    result: ResultKind
    instance_id: Optional[str] = Field(default=None, alias="instanceId")
    error: Optional[str] = None

    @classmethod
    def for_asg(cls, asg_name: str, result: ResultKind) -> "ResultEntry":
        return cls(autoscaling_group_name=asg_name, result=result)

    @classmethod
    def for_group(
        cls,
        key: GroupKey,
        result: ResultKind,
        instance_id: str,
        error: Optional[str] = None,
    ) -> "ResultEntry":
        return cls(result=result, instance_id=instance_id, error=error, **key.label)

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)
