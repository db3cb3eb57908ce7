"""Lambda handler for the Uploads API using Mangum."""
from mangum import Mangum

from uploads_api.config.settings import get_settings
from uploads_api.main import create_app

# Create FastAPI app
app = create_app(get_settings())

# Wrap with Mangum for Lambda compatibility
handler = Mangum(app, lifespan="off")

# Export handler for Lambda runtime
lambda_handler = handler
