# Log event codes
STATS_SUCCESS = 'STATS_SUCCESS'
STORAGE_UNAVAILABLE = 'STORAGE_UNAVAILABLE'
