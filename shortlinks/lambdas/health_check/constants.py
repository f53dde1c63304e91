# Log events
HEALTHY = 'HEALTHY'
UNHEALTHY = 'UNHEALTHY'
