# authrelay HTTP layer
# Created: 2026-10-19
#
# FastAPI application factory, dependencies and routers for the broker.
