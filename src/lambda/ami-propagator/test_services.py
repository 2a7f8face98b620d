"""Service wrapper tests against mocked boto3 clients."""

import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

import aws_clients
from models import DeviceMapping, EbsVolume, ScalingGroup
from services import AutoScalingService, CodeDeployService, Ec2Service, ParameterStore


def _paginated(client, pages):
    client.get_paginator.return_value.paginate.return_value = pages
    return client


class CodeDeployServiceTests(unittest.TestCase):
    def test_list_applications_reads_every_page(self):
        client = _paginated(MagicMock(), [{'applications': ['app1', 'app2']}, {'applications': ['app3']}])

        names = CodeDeployService(client).list_applications()

        self.assertEqual(names, ['app1', 'app2', 'app3'])
        client.get_paginator.assert_called_once_with('list_applications')

    def test_list_deployment_groups(self):
        client = _paginated(MagicMock(), [{'deploymentGroups': ['dg1']}, {'deploymentGroups': ['dg2']}])

        names = CodeDeployService(client).list_deployment_groups('app1')

        self.assertEqual(names, ['dg1', 'dg2'])
        client.get_paginator.return_value.paginate.assert_called_once_with(applicationName='app1')

    def test_get_deployment_group(self):
        client = MagicMock()
        client.get_deployment_group.return_value = {
            'deploymentGroupInfo': {
                'applicationName': 'app1',
                'deploymentGroupName': 'dg1',
                'computePlatform': 'Server',
                'deploymentStyle': {'deploymentType': 'BLUE_GREEN', 'deploymentOption': 'WITH_TRAFFIC_CONTROL'},
                'autoScalingGroups': [{'name': 'asg1', 'hook': 'CodeDeploy-managed-automatic-launch-deployment-hook'}],
            }
        }

        group = CodeDeployService(client).get_deployment_group('app1', 'dg1')

        self.assertEqual(group.name, 'dg1')
        self.assertEqual(group.auto_scaling_groups, ('asg1',))
        self.assertTrue(group.is_server_platform)
        self.assertTrue(group.is_blue_green)
        client.get_deployment_group.assert_called_once_with(applicationName='app1', deploymentGroupName='dg1')

    def test_get_deployment_group_without_style_or_groups(self):
        client = MagicMock()
        client.get_deployment_group.return_value = {
            'deploymentGroupInfo': {'deploymentGroupName': 'dg1', 'computePlatform': 'Lambda'}
        }

        group = CodeDeployService(client).get_deployment_group('app1', 'dg1')

        self.assertIsNone(group.deployment_type)
        self.assertEqual(group.auto_scaling_groups, ())


class AutoScalingServiceTests(unittest.TestCase):
    def test_launch_template_from_group_and_mixed_instances_policy(self):
        client = _paginated(MagicMock(), [{
            'AutoScalingGroups': [
                {
                    'AutoScalingGroupName': 'asg1',
                    'LaunchTemplate': {'LaunchTemplateId': 'lt-1', 'LaunchTemplateName': 'web', 'Version': '$Latest'},
                },
                {
                    'AutoScalingGroupName': 'asg2',
                    'MixedInstancesPolicy': {
                        'LaunchTemplate': {
                            'LaunchTemplateSpecification': {'LaunchTemplateId': 'lt-2', 'LaunchTemplateName': 'api'},
                        }
                    },
                },
                {'AutoScalingGroupName': 'asg3', 'LaunchConfigurationName': 'legacy-lc'},
            ]
        }])

        groups = AutoScalingService(client).describe_scaling_groups(['asg1', 'asg2', 'asg3'])

        self.assertEqual(groups, [ScalingGroup('asg1', 'lt-1'), ScalingGroup('asg2', 'lt-2'), ScalingGroup('asg3')])
        client.get_paginator.return_value.paginate.assert_called_once_with(
            AutoScalingGroupNames=['asg1', 'asg2', 'asg3']
        )


class Ec2ServiceTests(unittest.TestCase):
    def test_describe_image_picks_root_snapshot(self):
        client = MagicMock()
        client.describe_images.return_value = {
            'Images': [{
                'ImageId': 'ami-123',
                'RootDeviceName': '/dev/xvda',
                'BlockDeviceMappings': [
                    {'DeviceName': '/dev/sdb', 'Ebs': {'SnapshotId': 'snap-data'}},
                    {'DeviceName': '/dev/xvda', 'Ebs': {'SnapshotId': 'snap-root'}},
                ],
            }]
        }

        image = Ec2Service(client, dry_run=False).describe_image('ami-123')

        self.assertEqual(image.snapshot_id, 'snap-root')
        self.assertEqual(image.root_device_name, '/dev/xvda')
        client.describe_images.assert_called_once_with(ImageIds=['ami-123'])

    def test_describe_image_not_found(self):
        client = MagicMock()
        client.describe_images.return_value = {'Images': []}

        self.assertIsNone(Ec2Service(client, dry_run=False).describe_image('ami-123'))

    def test_get_latest_device_mappings(self):
        client = MagicMock()
        client.describe_launch_template_versions.return_value = {
            'LaunchTemplateVersions': [{
                'VersionNumber': 4,
                'LaunchTemplateData': {
                    'ImageId': 'ami-old',
                    'BlockDeviceMappings': [{
                        'DeviceName': '/dev/xvda',
                        'Ebs': {
                            'Encrypted': True,
                            'DeleteOnTermination': True,
                            'SnapshotId': 'snap-old',
                            'VolumeSize': 30,
                            'VolumeType': 'gp3',
                            'Iops': 3000,
                            'Throughput': 125,
                        },
                    }],
                },
            }]
        }

        mappings = Ec2Service(client, dry_run=False).get_latest_device_mappings('lt-1')

        self.assertEqual(mappings, [DeviceMapping('/dev/xvda', EbsVolume(
            snapshot_id='snap-old', encrypted=True, delete_on_termination=True,
            iops=3000, throughput=125, volume_size=30, volume_type='gp3',
        ))])
        client.describe_launch_template_versions.assert_called_once_with(
            LaunchTemplateId='lt-1', Versions=['$Latest']
        )

    def test_get_latest_device_mappings_without_versions(self):
        client = MagicMock()
        client.describe_launch_template_versions.return_value = {'LaunchTemplateVersions': []}

        with self.assertRaises(LookupError):
            Ec2Service(client, dry_run=False).get_latest_device_mappings('lt-1')

    def test_create_version_request(self):
        client = MagicMock()
        client.create_launch_template_version.return_value = {'LaunchTemplateVersion': {'VersionNumber': 5}}
        mapping = DeviceMapping('/dev/xvda', EbsVolume(snapshot_id='snap-new', volume_size=30, encrypted=False))

        version = Ec2Service(client, dry_run=False).create_version('lt-1', 'ami-new', [mapping], 'golden')

        self.assertEqual(version, 5)
        client.create_launch_template_version.assert_called_once_with(
            LaunchTemplateId='lt-1',
            SourceVersion='$Latest',
            LaunchTemplateData={
                'ImageId': 'ami-new',
                'BlockDeviceMappings': [{
                    'DeviceName': '/dev/xvda',
                    'Ebs': {'SnapshotId': 'snap-new', 'Encrypted': False, 'VolumeSize': 30},
                }],
            },
            DryRun=False,
            VersionDescription='golden',
        )

    def test_dry_run_operation_counts_as_success(self):
        client = MagicMock()
        client.create_launch_template_version.side_effect = ClientError(
            {'Error': {'Code': 'DryRunOperation', 'Message': 'Request would have succeeded'}},
            'CreateLaunchTemplateVersion',
        )

        version = Ec2Service(client, dry_run=True).create_version('lt-1', 'ami-new', [])

        self.assertIsNone(version)
        self.assertTrue(client.create_launch_template_version.call_args.kwargs['DryRun'])

    def test_other_errors_propagate(self):
        client = MagicMock()
        client.create_launch_template_version.side_effect = ClientError(
            {'Error': {'Code': 'UnauthorizedOperation', 'Message': 'denied'}},
            'CreateLaunchTemplateVersion',
        )

        with self.assertRaises(ClientError):
            Ec2Service(client, dry_run=True).create_version('lt-1', 'ami-new', [])


class ParameterStoreTests(unittest.TestCase):
    def test_get_parameter(self):
        client = MagicMock()
        client.get_parameter.return_value = {'Parameter': {'Name': 'golden-ami', 'Value': 'ami-123'}}

        self.assertEqual(ParameterStore(client).get_parameter('golden-ami'), 'ami-123')
        client.get_parameter.assert_called_once_with(Name='golden-ami')


class AwsClientsTests(unittest.TestCase):
    def setUp(self):
        aws_clients.reset()
        self.addCleanup(aws_clients.reset)

    @patch('aws_clients.boto3.client')
    def test_clients_are_created_once(self, client_factory):
        first = aws_clients.get_ec2()
        second = aws_clients.get_ec2()

        self.assertIs(first, second)
        client_factory.assert_called_once_with('ec2', region_name=aws_clients.config.AWS_REGION)

    @patch('aws_clients.boto3.client')
    def test_services_default_to_cached_clients(self, client_factory):
        ParameterStore()
        CodeDeployService()

        self.assertEqual([c.args[0] for c in client_factory.call_args_list], ['ssm', 'codedeploy'])


if __name__ == '__main__':
    unittest.main()
