__version__ = "0.1.0"
APP_NAME = "users-paginate-api"
