# Log events / error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
REDIRECT_FAILED = 'REDIRECT_FAILED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
