'''
Date: 2026 10 19

Summary:
Environment driven settings for the AMI propagator Lambda. Values are read
once when the container starts. The root logger is configured here so that
every sibling module shares the same level.
'''

import logging
import os


def _env_flag(name, default='false'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


# Parameter Store dataType that marks an AMI id parameter
IMAGE_PARAMETER_DATA_TYPE = os.environ.get('IMAGE_PARAMETER_DATA_TYPE', 'aws:ec2:image')

# CodeDeploy deployment group eligibility
TARGET_COMPUTE_PLATFORM = os.environ.get('TARGET_COMPUTE_PLATFORM', 'Server')
TARGET_DEPLOYMENT_TYPE = os.environ.get('TARGET_DEPLOYMENT_TYPE', 'BLUE_GREEN')

LAUNCH_TEMPLATE_SOURCE_VERSION = os.environ.get('LAUNCH_TEMPLATE_SOURCE_VERSION', '$Latest')

# When set, create_launch_template_version is only validated by EC2
DRY_RUN = _env_flag('DRY_RUN')

AWS_REGION = os.environ.get('AWS_REGION') or None

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# Configure logging for the Lambda function
logger = logging.getLogger()
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
