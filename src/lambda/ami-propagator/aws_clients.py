'''
Date: 2026 10 19

Summary:
Lazy boto3 clients. Each client is created on first use and cached for the
lifetime of the warm Lambda container, so a cold start only pays for the
services a run actually touches.
'''

import boto3

import config

_clients = {}


def get_client(service_name):
    """Return the cached boto3 client for ``service_name``, creating it on first call."""
    client = _clients.get(service_name)
    if client is None:
        client = boto3.client(service_name, region_name=config.AWS_REGION)
        _clients[service_name] = client
    return client


def get_codedeploy():
    return get_client('codedeploy')


def get_autoscaling():
    return get_client('autoscaling')


def get_ec2():
    return get_client('ec2')


def get_ssm():
    return get_client('ssm')


def reset():
    """Drop cached clients (used by tests)."""
    _clients.clear()
