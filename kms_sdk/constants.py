import os

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Logger Constants
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# AWS Constants
AWS_REGION_ENV_VAR = "AWS_REGION"
DEFAULT_AWS_REGION = "eu-central-1"
KMS_SERVICE_NAME = "kms"

VALID_AWS_REGIONS = (
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
    "af-south-1",
    "ap-east-1",
    "ap-south-1",
    "ap-south-2",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-southeast-3",
    "ap-southeast-4",
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-northeast-3",
    "ca-central-1",
    "eu-central-1",
    "eu-central-2",
    "eu-west-1",
    "eu-west-2",
    "eu-west-3",
    "eu-north-1",
    "eu-south-1",
    "eu-south-2",
    "il-central-1",
    "me-south-1",
    "me-central-1",
    "sa-east-1",
)

# KMS Operation Constants
DEFAULT_KEY_SPEC = "AES_256"
