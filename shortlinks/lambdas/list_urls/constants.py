# Log event codes
LIST_SUCCESS = 'LIST_SUCCESS'
STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
