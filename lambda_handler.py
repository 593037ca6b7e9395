"""AWS Lambda entry point behind API Gateway."""
from mangum import Mangum

from main import app

handler = Mangum(app)
