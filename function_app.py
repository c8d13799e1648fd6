# Azure Functions entry point (Python v2 programming model)
from mongo2blob.scheduler import create_function_app

app = create_function_app()
