"""Unit tests for the health_check AWS Lambda handler.

Test coverage includes:
    1. Healthy service reports its name and instance identifier (HTTP 200).
    2. Unreachable Redis or broken configuration returns HTTP 500.
"""

import json
from unittest.mock import MagicMock

import pytest

from shortlinks.lambdas.health_check import app
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.exceptions import AppConfigError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture()
def short_url_dao():
    dao = MagicMock()
    dao.ping.return_value = True
    return dao


@pytest.fixture()
def dao_class(short_url_dao):
    return MagicMock(return_value=short_url_dao)


@pytest.fixture(autouse=True)
def _patch_lambda_dependencies(monkeypatch, config, dao_class):
    monkeypatch.setattr(app, 'load_config', MagicMock(return_value=config))
    monkeypatch.setattr(app, 'ShortURLRedisDAO', dao_class)


# -------------------------------
# 1. Healthy service
# -------------------------------


def test_health_check(monkeypatch, context, short_url_dao, dao_class):
    monkeypatch.setenv('SERVICE_NAME', 'links-api')
    monkeypatch.setenv('INSTANCE_ID', 'i-0123456789')

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 200
    assert json.loads(response['body']) == {'message': 'OK', 'service_name': 'links-api', 'instance_id': 'i-0123456789'}
    short_url_dao.ping.assert_called_once_with()
    dao_class.assert_called_once_with(
        redis_host='redis',
        redis_port=6379,
        redis_db=0,
        redis_socket_timeout=2.0,
        redis_socket_connect_timeout=2.0,
        prefix='testapp:test',
        healthcheck=False,
    )


def test_health_check_defaults(monkeypatch, context):
    monkeypatch.delenv('SERVICE_NAME', raising=False)
    monkeypatch.delenv('INSTANCE_ID', raising=False)

    first = json.loads(app.lambda_handler({}, context)['body'])
    second = json.loads(app.lambda_handler({}, context)['body'])

    assert first['service_name'] == 'shortlinks'
    assert first['instance_id'] == second['instance_id'] == app.instance_id()


# -------------------------------
# 2. Unhealthy service
# -------------------------------


def test_health_check_redis_unreachable(context, short_url_dao):
    short_url_dao.ping.side_effect = DataStoreError("Can't connect to Redis at redis:6379/0.")

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 500
    assert json.loads(response['body']) == {'message': 'Internal Server Error', 'error_code': 'dao:data_store_error'}


def test_health_check_configuration_error(monkeypatch, context, dao_class):
    monkeypatch.setattr(app, 'load_config', MagicMock(side_effect=AppConfigError('Failed to fetch configuration from AWS AppConfig.')))

    response = app.lambda_handler({}, context)

    assert response['statusCode'] == 500
    assert json.loads(response['body'])['error_code'] == 'config:appconfig_error'
    dao_class.assert_not_called()
