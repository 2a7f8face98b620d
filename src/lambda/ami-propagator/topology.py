'''
Date: 2026 10 19

Summary:
Finds the Auto Scaling groups that should receive a new AMI by walking
CodeDeploy: every application, every deployment group of each application,
keeping only EC2/on-premises (Server) groups that deploy blue/green. The
first Auto Scaling group attached to each such deployment group is described
and returned.

Failing to list applications or deployment groups aborts the run, since a
missed application means missed targets. Failing to describe one Auto
Scaling group only skips that deployment group.
'''

import logging

from botocore.exceptions import BotoCoreError, ClientError

from errors import NoTargetsFound, TopologyEnumerationError

logger = logging.getLogger()


def is_eligible(deployment_group):
    return deployment_group.is_server_platform and deployment_group.is_blue_green


def _enumerate_deployment_groups(codedeploy):
    try:
        application_names = codedeploy.list_applications()
    except (BotoCoreError, ClientError) as e:
        raise TopologyEnumerationError(f"Failed to list CodeDeploy applications: {e}") from e

    for application_name in application_names:
        try:
            group_names = codedeploy.list_deployment_groups(application_name)
        except (BotoCoreError, ClientError) as e:
            raise TopologyEnumerationError(
                f"Failed to list deployment groups of application {application_name}: {e}"
            ) from e

        for group_name in group_names:
            try:
                yield codedeploy.get_deployment_group(application_name, group_name)
            except (BotoCoreError, ClientError) as e:
                raise TopologyEnumerationError(
                    f"Failed to get deployment group {group_name} of application {application_name}: {e}"
                ) from e


def resolve(codedeploy, autoscaling):
    """Return the target scaling groups in enumeration order.

    The same scaling group may appear more than once when several
    deployment groups reference it. Raises NoTargetsFound when nothing
    qualifies.
    """
    scaling_groups = []

    for deployment_group in _enumerate_deployment_groups(codedeploy):
        if not is_eligible(deployment_group):
            logger.debug(
                f"Skipping deployment group {deployment_group.name} of {deployment_group.application_name}: "
                f"platform={deployment_group.compute_platform}, type={deployment_group.deployment_type}"
            )
            continue

        if not deployment_group.auto_scaling_groups:
            logger.info(
                f"Deployment group has no Auto Scaling groups, skipping. "
                f"Application Name : {deployment_group.application_name}, "
                f"DeploymentGroup name : {deployment_group.name}"
            )
            continue

        # Only the first Auto Scaling group of a deployment group is used
        asg_names = list(deployment_group.auto_scaling_groups[:1])
        try:
            found = autoscaling.describe_scaling_groups(asg_names)
        except (BotoCoreError, ClientError) as e:
            logger.error(
                f"DescribeAutoScalingGroups failed - ASG : {asg_names[0]}, "
                f"App : {deployment_group.application_name}, DeploymentGroup : {deployment_group.name}: {e}"
            )
            continue

        if not found:
            logger.warning(
                f"Auto Scaling group {asg_names[0]} referenced by {deployment_group.name} does not exist"
            )
        scaling_groups.extend(found)

    # Nothing to update ends the run
    if not scaling_groups:
        raise NoTargetsFound("There are no target Auto Scaling groups")

    logger.info(f"Target Auto Scaling groups : {' '.join(group.name for group in scaling_groups)}")
    return scaling_groups
