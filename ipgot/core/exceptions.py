"""
Exceptions raised by IPGOT

Resolvers turn anything below IPGotError into a LookupFailure; other
exceptions reach the HTTP layer and become a 500.
"""

class IPGotError(Exception):
    """Root of every error IPGOT raises on purpose"""
    pass

class ConfigurationError(IPGotError):
    """Bad YAML file, env override or setting value"""
    pass

class ValidationError(IPGotError):
    """Query address is not a dotted-quad IPv4"""
    pass

class NetworkError(IPGotError):
    """Upstream unreachable: timeout, refused connection, TLS failure"""
    def __init__(self, message, service=None):
        self.service = service
        super().__init__(message)

class APIError(IPGotError):
    """Upstream answered, but with a non-2xx status or a failed-query body"""
    def __init__(self, service, message, status_code=None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} API error: {message}")

class RateLimitError(APIError):
    """Upstream answered 429; retry_after comes from the Retry-After header"""
    def __init__(self, service, retry_after=None):
        self.retry_after = retry_after
        message = f"Rate limit exceeded for {service}"
        if retry_after:
            message += f", retry after {retry_after} seconds"
        super().__init__(service, message, status_code=429)

class DataParsingError(IPGotError):
    """Upstream body is not JSON or not a JSON object"""
    def __init__(self, message, source=None):
        self.source = source
        super().__init__(message)
