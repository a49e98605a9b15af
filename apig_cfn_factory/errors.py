class ConfigurationError(Exception):
    """ Raised when the API definition cannot be turned into a template """
