"""
Docker Engine REST API endpoint definitions
"""


class DockerEndpoints:
    """
    Docker Engine API endpoints

    All endpoints are relative to the versioned base URL
    (e.g., http://docker/v1.41) served over the daemon's UNIX socket.
    """

    # System
    PING = "/_ping"
    VERSION = "/version"
    EVENTS = "/events"

    # Images
    IMAGES_LIST = "/images/json"
    IMAGE_INSPECT = "/images/{image_id}/json"

    # Containers
    CONTAINERS_LIST = "/containers/json"
    CONTAINER_CREATE = "/containers/create"
    CONTAINER_INSPECT = "/containers/{container_id}/json"
    CONTAINER_TOP = "/containers/{container_id}/top"
    CONTAINER_LOGS = "/containers/{container_id}/logs"
    CONTAINER_START = "/containers/{container_id}/start"
    CONTAINER_ATTACH = "/containers/{container_id}/attach"
    CONTAINER_KILL = "/containers/{container_id}/kill"
    CONTAINER_REMOVE = "/containers/{container_id}"
