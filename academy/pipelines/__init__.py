"""
Pipelines - stateless orchestration between routers and services.
"""
