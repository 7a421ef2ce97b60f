# Log event codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
SHORTEN_REJECTED = 'SHORTEN_REJECTED'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
