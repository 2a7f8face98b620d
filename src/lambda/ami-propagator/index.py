'''
Date: 2026 10 19

Summary:
This Lambda function rolls a newly published golden AMI out to the launch
templates used by CodeDeploy blue/green deployments. It is triggered by an
EventBridge "Parameter Store Change" event. When the changed parameter is
of the aws:ec2:image data type, its value (the new AMI id) is read from
Parameter Store. The function then walks every CodeDeploy application and
deployment group, keeps the EC2/on-premises groups that deploy blue/green,
and collects their Auto Scaling groups. For each group's launch template a
new version is created that boots the new AMI while keeping the existing
block device settings. Templates shared by several groups are written only
once. Events for other parameter types are ignored. Fatal conditions end
the run with a 500 response, and per template failures are listed in the
report returned with a 200 response. Instance refresh is left to the
following blue/green deployment.
'''

import json
import logging

import config
import events
import topology
from errors import PropagationError
from launch_templates import LaunchTemplateUpdater
from services import AutoScalingService, CodeDeployService, Ec2Service, ParameterStore

logger = logging.getLogger()


def _response(status_code, body):
    return {
        'statusCode': status_code,
        'body': json.dumps(body),
    }


def run(event, codedeploy=None, autoscaling=None, ec2=None, parameters=None):
    """Resolve the new AMI, find the target groups and update their launch templates."""
    # Reject unrelated parameter changes before touching AWS
    event_detail = events.parse_event(event)

    # Read the new AMI id from Parameter Store
    parameters = parameters or ParameterStore()
    image_id = events.resolve_image_id(parameters, event_detail.name)

    # Collect the Auto Scaling groups behind blue/green deployment groups
    scaling_groups = topology.resolve(
        codedeploy or CodeDeployService(),
        autoscaling or AutoScalingService(),
    )

    # Create the new launch template versions
    updater = LaunchTemplateUpdater(ec2 or Ec2Service())
    return updater.update(
        scaling_groups,
        image_id,
        description=f"{image_id} from parameter {event_detail.name}",
    )


def handler(event, context):
    # Log the incoming event for debugging purposes
    logger.info(f"Received event: {json.dumps(event, default=str)}")
    if isinstance(event, dict):
        events.describe_envelope(event)

    try:
        report = run(event)
    except PropagationError as e:
        if e.is_noop:
            logger.info(f"Ignoring event: {e}")
            return _response(200, {'status': 'IGNORED', 'reason': str(e)})
        logger.error(f"AMI propagation aborted ({type(e).__name__}): {e}")
        return _response(500, {'status': 'ABORTED', 'error': type(e).__name__, 'reason': str(e)})

    if config.DRY_RUN:
        logger.info("DRY_RUN is enabled, no launch template version was created")
    return _response(200, report.to_dict())
