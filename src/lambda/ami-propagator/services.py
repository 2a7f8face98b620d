'''
Date: 2026 10 19

Summary:
Thin wrappers over the boto3 clients the propagator talks to: CodeDeploy,
EC2 Auto Scaling, EC2 (images and launch templates) and SSM Parameter Store.
They translate raw API responses into the model types and let botocore
errors propagate; whether a failure is fatal or only skips one item is
decided by the caller.
'''

import logging

from botocore.exceptions import ClientError

import aws_clients
import config
from models import DeploymentGroup, DeviceMapping, ImageReference, ScalingGroup

logger = logging.getLogger()


class CodeDeployService:
    def __init__(self, client=None):
        self._client = client or aws_clients.get_codedeploy()

    def list_applications(self):
        """Return every application name, reading all pages."""
        names = []
        paginator = self._client.get_paginator('list_applications')
        for page in paginator.paginate():
            names.extend(page.get('applications', []))
        return names

    def list_deployment_groups(self, application_name):
        names = []
        paginator = self._client.get_paginator('list_deployment_groups')
        for page in paginator.paginate(applicationName=application_name):
            names.extend(page.get('deploymentGroups', []))
        return names

    def get_deployment_group(self, application_name, group_name):
        response = self._client.get_deployment_group(
            applicationName=application_name,
            deploymentGroupName=group_name,
        )
        return DeploymentGroup.from_response(application_name, response['deploymentGroupInfo'])


class AutoScalingService:
    def __init__(self, client=None):
        self._client = client or aws_clients.get_autoscaling()

    def describe_scaling_groups(self, names):
        groups = []
        paginator = self._client.get_paginator('describe_auto_scaling_groups')
        for page in paginator.paginate(AutoScalingGroupNames=list(names)):
            groups.extend(ScalingGroup.from_response(asg) for asg in page.get('AutoScalingGroups', []))
        return groups


class Ec2Service:
    def __init__(self, client=None, dry_run=None):
        self._client = client or aws_clients.get_ec2()
        self.dry_run = config.DRY_RUN if dry_run is None else dry_run

    def describe_image(self, image_id):
        """Return the image with its root device snapshot, or None if EC2 does not know it."""
        response = self._client.describe_images(ImageIds=[image_id])
        images = response.get('Images', [])
        if not images:
            return None
        image = images[0]
        root_device_name = image.get('RootDeviceName')
        # The root volume snapshot backs the new launch template versions
        ebs_mappings = [m for m in image.get('BlockDeviceMappings', []) if m.get('Ebs')]
        root = next((m for m in ebs_mappings if m.get('DeviceName') == root_device_name), None)
        if root is None and ebs_mappings:
            root = ebs_mappings[0]
        return ImageReference(
            image_id=image_id,
            snapshot_id=root['Ebs'].get('SnapshotId') if root else None,
            root_device_name=root_device_name or (root.get('DeviceName') if root else None),
        )

    def get_latest_device_mappings(self, launch_template_id):
        response = self._client.describe_launch_template_versions(
            LaunchTemplateId=launch_template_id,
            Versions=[config.LAUNCH_TEMPLATE_SOURCE_VERSION],
        )
        versions = response.get('LaunchTemplateVersions', [])
        if not versions:
            raise LookupError(f"No {config.LAUNCH_TEMPLATE_SOURCE_VERSION} version found for {launch_template_id}")
        data = versions[0].get('LaunchTemplateData', {})
        return [DeviceMapping.from_response(m) for m in data.get('BlockDeviceMappings', [])]

    def create_version(self, launch_template_id, image_id, device_mappings, description=None):
        """Create a new template version booting ``image_id``.

        Returns the new version number, or None for a dry run that EC2
        accepted.
        """
        params = {
            'LaunchTemplateId': launch_template_id,
            'SourceVersion': config.LAUNCH_TEMPLATE_SOURCE_VERSION,
            'LaunchTemplateData': {
                'ImageId': image_id,
                'BlockDeviceMappings': [m.to_request() for m in device_mappings],
            },
            'DryRun': self.dry_run,
        }
        if description:
            params['VersionDescription'] = description
        # EC2 answers a successful dry run with a DryRunOperation error
        try:
            response = self._client.create_launch_template_version(**params)
        except ClientError as e:
            if self.dry_run and e.response.get('Error', {}).get('Code') == 'DryRunOperation':
                logger.info(f"Dry run accepted for launch template {launch_template_id}")
                return None
            raise
        return response['LaunchTemplateVersion']['VersionNumber']


class ParameterStore:
    def __init__(self, client=None):
        self._client = client or aws_clients.get_ssm()

    def get_parameter(self, name):
        response = self._client.get_parameter(Name=name)
        return response['Parameter']['Value']
