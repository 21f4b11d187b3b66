from typing import Any

from botocore.client import BaseClient


# API Gateway proxy integration
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]

# Configuration document, one service's section, and one store section of it
type AppConfig = dict[str, Any]
type ServiceConfig = dict[str, Any]
type RedisConfig = dict[str, Any]

# boto3 clients
type AppConfigDataClient = BaseClient
