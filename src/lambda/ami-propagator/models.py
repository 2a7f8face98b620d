'''
Date: 2026 10 19

Summary:
Plain data carried between the stages of a propagation run: the parsed
Parameter Store change event, CodeDeploy deployment groups, Auto Scaling
groups, launch template block device mappings, the new AMI and the per run
update report.
'''

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

import config


@dataclass(frozen=True)
class EventDetail:
    data_type: str
    name: str
    description: Optional[str] = None
    type: Optional[str] = None
    operation: Optional[str] = None

    @classmethod
    def from_dict(cls, detail):
        return cls(
            data_type=detail.get('dataType'),
            name=detail.get('name'),
            description=detail.get('description'),
            type=detail.get('type'),
            operation=detail.get('operation'),
        )


@dataclass(frozen=True)
class DeploymentGroup:
    application_name: str
    name: str
    compute_platform: Optional[str]
    deployment_type: Optional[str]
    auto_scaling_groups: Tuple[str, ...] = ()

    @classmethod
    def from_response(cls, application_name, info):
        return cls(
            application_name=application_name,
            name=info.get('deploymentGroupName'),
            compute_platform=info.get('computePlatform'),
            deployment_type=(info.get('deploymentStyle') or {}).get('deploymentType'),
            auto_scaling_groups=tuple(
                asg['name'] for asg in info.get('autoScalingGroups', []) if asg.get('name')
            ),
        )

    @property
    def is_server_platform(self):
        return self.compute_platform == config.TARGET_COMPUTE_PLATFORM

    @property
    def is_blue_green(self):
        return self.deployment_type == config.TARGET_DEPLOYMENT_TYPE


@dataclass(frozen=True)
class ScalingGroup:
    name: str
    launch_template_id: Optional[str] = None

    @classmethod
    def from_response(cls, asg):
        spec = asg.get('LaunchTemplate')
        if not spec:
            # Mixed instances groups keep the template one level deeper
            policy = asg.get('MixedInstancesPolicy') or {}
            spec = (policy.get('LaunchTemplate') or {}).get('LaunchTemplateSpecification')
        spec = spec or {}
        return cls(
            name=asg['AutoScalingGroupName'],
            launch_template_id=spec.get('LaunchTemplateId'),
        )


# (attribute, EC2 key) pairs shared by the launch template response and request shapes
_EBS_FIELDS = (
    ('snapshot_id', 'SnapshotId'),
    ('encrypted', 'Encrypted'),
    ('delete_on_termination', 'DeleteOnTermination'),
    ('iops', 'Iops'),
    ('throughput', 'Throughput'),
    ('volume_size', 'VolumeSize'),
    ('volume_type', 'VolumeType'),
    ('kms_key_id', 'KmsKeyId'),
)


@dataclass(frozen=True)
class EbsVolume:
    snapshot_id: Optional[str] = None
    encrypted: Optional[bool] = None
    delete_on_termination: Optional[bool] = None
    iops: Optional[int] = None
    throughput: Optional[int] = None
    volume_size: Optional[int] = None
    volume_type: Optional[str] = None
    kms_key_id: Optional[str] = None

    @classmethod
    def from_response(cls, ebs):
        return cls(**{attr: ebs.get(key) for attr, key in _EBS_FIELDS})

    def to_request(self):
        request = {}
        for attr, key in _EBS_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                request[key] = value
        return request


@dataclass(frozen=True)
class DeviceMapping:
    device_name: str
    ebs: Optional[EbsVolume] = None
    virtual_name: Optional[str] = None
    no_device: Optional[str] = None

    @classmethod
    def from_response(cls, mapping):
        ebs = mapping.get('Ebs')
        return cls(
            device_name=mapping.get('DeviceName'),
            ebs=EbsVolume.from_response(ebs) if ebs is not None else None,
            virtual_name=mapping.get('VirtualName'),
            no_device=mapping.get('NoDevice'),
        )

    def with_snapshot(self, snapshot_id):
        return replace(self, ebs=replace(self.ebs or EbsVolume(), snapshot_id=snapshot_id))

    def to_request(self):
        request = {'DeviceName': self.device_name}
        if self.ebs is not None:
            request['Ebs'] = self.ebs.to_request()
        if self.virtual_name is not None:
            request['VirtualName'] = self.virtual_name
        if self.no_device is not None:
            request['NoDevice'] = self.no_device
        return request


@dataclass(frozen=True)
class ImageReference:
    image_id: str
    snapshot_id: Optional[str] = None
    root_device_name: Optional[str] = None


class OutcomeStatus(str, Enum):
    UPDATED = 'updated'
    SKIPPED_ALREADY_UPDATED = 'skipped_already_updated'
    SKIPPED_NO_DEVICE_MAPPING = 'skipped_no_device_mapping'
    FAILED = 'failed'

    @property
    def is_skip(self):
        return self in (OutcomeStatus.SKIPPED_ALREADY_UPDATED, OutcomeStatus.SKIPPED_NO_DEVICE_MAPPING)


@dataclass(frozen=True)
class UpdateOutcome:
    status: OutcomeStatus
    reason: Optional[str] = None
    version_number: Optional[int] = None

    @classmethod
    def updated(cls, version_number=None):
        return cls(OutcomeStatus.UPDATED, version_number=version_number)

    @classmethod
    def already_updated(cls, reason):
        return cls(OutcomeStatus.SKIPPED_ALREADY_UPDATED, reason=reason)

    @classmethod
    def no_device_mapping(cls, reason='launch template has no block device mappings'):
        return cls(OutcomeStatus.SKIPPED_NO_DEVICE_MAPPING, reason=reason)

    @classmethod
    def failed(cls, reason):
        return cls(OutcomeStatus.FAILED, reason=reason)

    def to_dict(self):
        data = {'status': self.status.value}
        if self.reason:
            data['reason'] = self.reason
        if self.version_number is not None:
            data['versionNumber'] = self.version_number
        return data


@dataclass(frozen=True)
class GroupResult:
    scaling_group: str
    launch_template_id: Optional[str]
    outcome: UpdateOutcome

    def to_dict(self):
        return {
            'autoScalingGroup': self.scaling_group,
            'launchTemplateId': self.launch_template_id,
            **self.outcome.to_dict(),
        }


@dataclass
class UpdateReport:
    """Result of one updater pass.

    ``outcomes`` holds one entry per launch template id, ``groups`` one
    entry per scaling group in input order. Counts are per scaling group.
    """

    image_id: str
    dry_run: bool = False
    outcomes: Dict[str, UpdateOutcome] = field(default_factory=dict)
    groups: List[GroupResult] = field(default_factory=list)

    def record(self, scaling_group, launch_template_id, outcome):
        self.groups.append(GroupResult(scaling_group, launch_template_id, outcome))

    def _with_status(self, predicate):
        return [result for result in self.groups if predicate(result.outcome.status)]

    @property
    def target_count(self):
        return len(self.groups)

    @property
    def updated(self):
        return self._with_status(lambda status: status is OutcomeStatus.UPDATED)

    @property
    def skipped(self):
        return self._with_status(lambda status: status.is_skip)

    @property
    def failed(self):
        return self._with_status(lambda status: status is OutcomeStatus.FAILED)

    @property
    def status(self):
        return 'PARTIAL' if self.failed else 'SUCCESS'

    def to_dict(self):
        return {
            'status': self.status,
            'imageId': self.image_id,
            'dryRun': self.dry_run,
            'targetCount': self.target_count,
            'updatedCount': len(self.updated),
            'skippedCount': len(self.skipped),
            'failedCount': len(self.failed),
            'launchTemplates': {
                template_id: outcome.to_dict() for template_id, outcome in self.outcomes.items()
            },
            'skipped': [result.to_dict() for result in self.skipped],
            'failed': [result.to_dict() for result in self.failed],
        }
