from adapters.aws.dynamodb_policy_backend import DynamoDBPolicyBackend

__all__ = ["DynamoDBPolicyBackend"]
