# Log event codes
MISSING_LINK_ID = 'MISSING_LINK_ID'
DELETE_SUCCESS = 'DELETE_SUCCESS'
STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
