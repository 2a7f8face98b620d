'''
Date: 2026 10 19

Summary:
Points the launch templates of the target Auto Scaling groups at a new AMI.
For each template the latest version is read, its block device mappings are
copied with the root volume's snapshot swapped for the new image's snapshot,
and a new version is created from it. Launch templates shared by several
groups are written once per run; failures are recorded per template and do
not stop the remaining updates.
'''

import logging

from botocore.exceptions import BotoCoreError, ClientError

from errors import ImageLookupError
from models import OutcomeStatus, UpdateOutcome, UpdateReport

logger = logging.getLogger()


def _root_index(device_mappings, root_device_name):
    """Index of the EBS mapping holding the root volume, or None without any EBS mapping."""
    # Prefer the device the image boots from
    for index, mapping in enumerate(device_mappings):
        if mapping.ebs is not None and mapping.device_name == root_device_name:
            return index
    # Otherwise the first EBS volume of the template
    for index, mapping in enumerate(device_mappings):
        if mapping.ebs is not None:
            return index
    return None


def build_device_mappings(current, image):
    """Copy ``current`` with only the root volume's snapshot replaced by the image's.

    Mappings without any EBS volume are returned unchanged.
    """
    root = _root_index(current, image.root_device_name)
    return [
        mapping.with_snapshot(image.snapshot_id) if index == root else mapping
        for index, mapping in enumerate(current)
    ]


class LaunchTemplateUpdater:
    def __init__(self, ec2):
        self.ec2 = ec2

    def resolve_image(self, image_id):
        try:
            image = self.ec2.describe_image(image_id)
        except (BotoCoreError, ClientError) as e:
            raise ImageLookupError(f"Describe image {image_id} failed: {e}") from e
        if image is None:
            raise ImageLookupError(f"Image {image_id} not found")
        if not image.snapshot_id:
            raise ImageLookupError(f"Image {image_id} has no EBS root snapshot")
        logger.info(f"Image {image_id} root snapshot : {image.snapshot_id}")
        return image

    def update(self, scaling_groups, image_id, description=None):
        report = UpdateReport(image_id=image_id, dry_run=self.ec2.dry_run)
        # The new image's snapshot is shared by every template of this run
        image = self.resolve_image(image_id)
        first_writer = {}

        for scaling_group in scaling_groups:
            template_id = scaling_group.launch_template_id
            if not template_id:
                logger.error(f"ASG : {scaling_group.name} has no launch template, skipping")
                report.record(scaling_group.name, None, UpdateOutcome.failed('Auto Scaling group has no launch template'))
                continue

            # Some ASGs share a launch template, which gets one version per run
            previous = report.outcomes.get(template_id)
            if previous is not None:
                owner = first_writer[template_id]
                if previous.status is OutcomeStatus.UPDATED:
                    logger.info(
                        f"Skipping ASG {scaling_group.name} launch template update - "
                        f"{template_id} already updated for ASG {owner}"
                    )
                    outcome = UpdateOutcome.already_updated(f"already updated for ASG {owner}")
                else:
                    # A failed template is not retried for later ASGs sharing it
                    outcome = previous
                report.record(scaling_group.name, template_id, outcome)
                continue

            outcome = self._update_template(scaling_group.name, template_id, image, description)
            report.outcomes[template_id] = outcome
            first_writer[template_id] = scaling_group.name
            report.record(scaling_group.name, template_id, outcome)

        logger.info(
            f"Launch template update finished: targets={report.target_count}, updated={len(report.updated)}, "
            f"skipped={len(report.skipped)}, failed={len(report.failed)}"
        )
        return report

    def _update_template(self, asg_name, template_id, image, description):
        # Read the block device mappings of the current version
        try:
            current = self.ec2.get_latest_device_mappings(template_id)
        except (BotoCoreError, ClientError, LookupError) as e:
            logger.error(f"Failed to get current version of launch template {template_id}, skipping: {e}")
            return UpdateOutcome.failed(f"describe launch template versions failed: {e}")

        if not current:
            logger.warning(f"Launch template {template_id} has no block device mappings, skipping")
            return UpdateOutcome.no_device_mapping()

        # Instance store or NoDevice entries only: no volume to carry the new snapshot
        if _root_index(current, image.root_device_name) is None:
            logger.warning(f"Launch template {template_id} has no EBS block device mapping, skipping")
            return UpdateOutcome.no_device_mapping('launch template has no EBS block device mapping')

        device_mappings = build_device_mappings(current, image)

        # Create the new version booting the new image
        try:
            version_number = self.ec2.create_version(template_id, image.image_id, device_mappings, description)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"ASG : {asg_name} launch template {template_id} not updated: {e}")
            return UpdateOutcome.failed(f"create launch template version failed: {e}")

        logger.info(f"ASG : {asg_name} - launch template {template_id} updated (version {version_number})")
        return UpdateOutcome.updated(version_number)
