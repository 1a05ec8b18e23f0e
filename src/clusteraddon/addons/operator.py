"""Kind-agnostic apply and delete of manifest objects."""

import logging
from typing import Any

from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import (
    DynamicApiError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from urllib3.exceptions import HTTPError

from clusteraddon.addons.manifest import ManifestObject
from clusteraddon.utils.errors import ApplyError, DeleteError, UnknownKindError

logger = logging.getLogger(__name__)

DEFAULT_FIELD_MANAGER = "cluster-addon-controller"
DEFAULT_NAMESPACE = "default"


class ResourceOperator:
    """Apply and delete arbitrary objects through the dynamic client.

    Kinds are resolved to REST resources via API discovery, so manifests may
    contain any kind the cluster serves, custom resources included.
    """

    def __init__(self, dynamic: DynamicClient, field_manager: str = DEFAULT_FIELD_MANAGER):
        """Initialize operator.

        Args:
            dynamic: Dynamic client bound to the target cluster
            field_manager: Field manager identity used for server-side apply
        """
        self.dynamic = dynamic
        self.field_manager = field_manager

    def _resolve(self, obj: ManifestObject) -> tuple[Any, str | None]:
        """Resolve an object to its API resource and effective namespace.

        Raises:
            UnknownKindError: If the cluster does not serve the object's kind
        """
        if not obj.api_version or not obj.kind:
            raise UnknownKindError(f"object {obj.name!r} is missing apiVersion or kind")

        try:
            resource = self.dynamic.resources.get(api_version=obj.api_version, kind=obj.kind)
        except (ResourceNotFoundError, ResourceNotUniqueError) as e:
            raise UnknownKindError(
                f"failed to get REST mapping for {obj.api_version}/{obj.kind}: {e}"
            ) from e
        except DynamicApiError as e:
            raise UnknownKindError(
                f"failed to discover {obj.api_version}/{obj.kind}: {e.summary()}"
            ) from e
        except (ApiException, HTTPError) as e:
            raise UnknownKindError(f"failed to discover {obj.api_version}/{obj.kind}: {e}") from e

        if resource.namespaced:
            return resource, obj.namespace or DEFAULT_NAMESPACE
        return resource, None

    def apply(self, obj: ManifestObject) -> dict[str, Any]:
        """Server-side apply an object with forced field ownership.

        Args:
            obj: Object to apply

        Returns:
            The object as returned by the API server

        Raises:
            UnknownKindError: If the kind cannot be resolved
            ApplyError: If the API server rejects the apply or is unreachable
        """
        resource, namespace = self._resolve(obj)
        body = obj.to_dict()
        if namespace:
            body.setdefault("metadata", {})["namespace"] = namespace

        try:
            result = self.dynamic.server_side_apply(
                resource,
                body=body,
                name=obj.name,
                namespace=namespace,
                field_manager=self.field_manager,
                force_conflicts=True,
            )
        except DynamicApiError as e:
            logger.error(f"Failed to apply {obj.describe()}: {e.summary()}")
            logger.error(f"Object body:\n{obj.to_yaml()}")
            raise ApplyError(f"failed to apply resource {obj.describe()}: {e.summary()}") from e
        except (ApiException, HTTPError) as e:
            logger.error(f"Failed to apply {obj.describe()}: {e}")
            raise ApplyError(f"failed to apply resource {obj.describe()}: {e}") from e

        logger.info(f"Applied {obj.describe()}")
        return result.to_dict() if hasattr(result, "to_dict") else result

    def delete(self, obj: ManifestObject) -> bool:
        """Delete an object by name and namespace.

        Args:
            obj: Object to delete

        Returns:
            True if a delete was issued, False if the object was already absent

        Raises:
            UnknownKindError: If the kind cannot be resolved
            DeleteError: If the API server rejects the delete or is unreachable
        """
        resource, namespace = self._resolve(obj)

        try:
            self.dynamic.delete(resource, name=obj.name, namespace=namespace)
        except NotFoundError:
            logger.info(f"{obj.describe()} already absent")
            return False
        except DynamicApiError as e:
            logger.error(f"Failed to delete {obj.describe()}: {e.summary()}")
            logger.error(f"Object body:\n{obj.to_yaml()}")
            raise DeleteError(f"failed to delete resource {obj.describe()}: {e.summary()}") from e
        except (ApiException, HTTPError) as e:
            logger.error(f"Failed to delete {obj.describe()}: {e}")
            raise DeleteError(f"failed to delete resource {obj.describe()}: {e}") from e

        logger.info(f"Deleted {obj.describe()}")
        return True
