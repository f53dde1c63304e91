# Log events / error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
SHORTEN_FAILED = 'SHORTEN_FAILED'
SHORTEN_REJECTED = 'SHORTEN_REJECTED'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
