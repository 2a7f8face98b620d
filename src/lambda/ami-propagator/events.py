'''
Date: 2026 10 19

Summary:
Turns the EventBridge "Parameter Store Change" notification into an
EventDetail and resolves the changed parameter to the new AMI id. Events for
parameters that are not of the AMI data type are rejected before any AWS call
is made.

Event pattern (detail):
{
    "dataType": "aws:ec2:image",
    "name": "GoldenAMI",
    "description": "Golden AMI Parameter Update Event",
    "type": "String",
    "operation": "Update"
}
'''

import json
import logging

from botocore.exceptions import BotoCoreError, ClientError

import config
from errors import MalformedEvent, ParameterLookupError, UnsupportedEventType
from models import EventDetail

logger = logging.getLogger()

_ENVELOPE_FIELDS = (
    ('version', 'Event Version'),
    ('id', 'Event ID'),
    ('detail-type', 'Event DetailType'),
    ('source', 'Event Source'),
    ('account', 'Event Account ID'),
    ('resources', 'Event Resources'),
)


def describe_envelope(event):
    for key, label in _ENVELOPE_FIELDS:
        if key in event:
            logger.info(f"{label} : {event[key]}")


def parse_event(event):
    if not isinstance(event, dict):
        raise MalformedEvent(f"Event must be an object, got {type(event).__name__}")

    # EventBridge delivers the parameter change in detail
    detail = event.get('detail', event)
    if isinstance(detail, (str, bytes)):
        try:
            detail = json.loads(detail)
        except ValueError as e:
            raise MalformedEvent(f"Failed to decode event detail: {e}") from e
    if not isinstance(detail, dict):
        raise MalformedEvent("Event detail is not an object")

    event_detail = EventDetail.from_dict(detail)
    if event_detail.data_type != config.IMAGE_PARAMETER_DATA_TYPE:
        raise UnsupportedEventType(
            f"Parameter dataType {event_detail.data_type!r} is not {config.IMAGE_PARAMETER_DATA_TYPE!r}"
        )
    if not event_detail.name:
        raise MalformedEvent("Event detail has no parameter name")

    logger.info(f"Updated parameter name : {event_detail.name}")
    return event_detail


def resolve_image_id(parameters, name):
    """Read the AMI id stored under parameter ``name``."""
    try:
        value = parameters.get_parameter(name)
    except (BotoCoreError, ClientError) as e:
        raise ParameterLookupError(f"Failed to get parameter {name} from Parameter Store: {e}") from e

    image_id = (value or '').strip()
    if not image_id:
        raise ParameterLookupError(f"Parameter {name} has an empty value")
    logger.info(f"Parameter {name} resolves to image {image_id}")
    return image_id
