"""Application model consumed by exporters and importers"""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


@dataclass
class ImageInfo:
    """Image hub location and credentials"""

    hub_url: str = ""
    namespace: str = ""
    hub_user: str = ""
    hub_password: str = field(default="", repr=False)

    def is_empty(self) -> bool:
        """Check whether no hub information is set"""
        return not any([self.hub_url, self.namespace, self.hub_user, self.hub_password])

    def has_credentials(self) -> bool:
        """Check whether both username and password are set"""
        return bool(self.hub_user and self.hub_password)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "hub_url": self.hub_url,
            "namespace": self.namespace,
            "hub_user": self.hub_user,
            "hub_password": self.hub_password,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ImageInfo':
        """Create from dictionary"""
        data = data or {}
        return cls(
            hub_url=data.get("hub_url", ""),
            namespace=data.get("namespace", ""),
            hub_user=data.get("hub_user", ""),
            hub_password=data.get("hub_password", ""),
        )


@dataclass
class ComponentVolume:
    """File-backed volume of a component"""

    volume_mount_path: str
    file_content: str = ""
    volume_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "volume_name": self.volume_name,
            "volume_mount_path": self.volume_mount_path,
            "file_content": self.file_content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentVolume':
        """Create from dictionary"""
        return cls(
            volume_mount_path=data["volume_mount_path"],
            file_content=data.get("file_content", ""),
            volume_name=data.get("volume_name", ""),
        )


def _split_extra(data: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


@dataclass
class Component:
    """Application component"""

    service_cname: str
    service_alias: str = ""
    share_image: str = ""
    app_image: ImageInfo = field(default_factory=ImageInfo)
    memory: int = 0
    volumes: List[ComponentVolume] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("service_cname", "service_alias", "share_image", "app_image", "memory", "volumes")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = dict(self.extra)
        data.update({
            "service_cname": self.service_cname,
            "service_alias": self.service_alias,
            "share_image": self.share_image,
            "app_image": self.app_image.to_dict(),
            "memory": self.memory,
            "volumes": [v.to_dict() for v in self.volumes],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Component':
        """Create from dictionary"""
        return cls(
            service_cname=data["service_cname"],
            service_alias=data.get("service_alias", ""),
            share_image=data.get("share_image", ""),
            app_image=ImageInfo.from_dict(data.get("app_image")),
            memory=data.get("memory", 0),
            volumes=[ComponentVolume.from_dict(v) for v in data.get("volumes") or []],
            extra=_split_extra(data, cls._KNOWN),
        )


@dataclass
class Plugin:
    """Application plugin"""

    plugin_name: str
    share_image: str = ""
    plugin_image: ImageInfo = field(default_factory=ImageInfo)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("plugin_name", "share_image", "plugin_image")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = dict(self.extra)
        data.update({
            "plugin_name": self.plugin_name,
            "share_image": self.share_image,
            "plugin_image": self.plugin_image.to_dict(),
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Plugin':
        """Create from dictionary"""
        return cls(
            plugin_name=data["plugin_name"],
            share_image=data.get("share_image", ""),
            plugin_image=ImageInfo.from_dict(data.get("plugin_image")),
            extra=_split_extra(data, cls._KNOWN),
        )


@dataclass
class KubernetesResource:
    """Raw Kubernetes manifest for one resource"""

    content: str
    name: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("content", "name")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = dict(self.extra)
        data.update({"name": self.name, "content": self.content})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KubernetesResource':
        """Create from dictionary"""
        return cls(
            content=data["content"],
            name=data.get("name", ""),
            extra=_split_extra(data, cls._KNOWN),
        )


@dataclass
class ApplicationConfig:
    """Application description to be packaged

    The exporters treat this value as read-only. Offline metadata is rendered
    from ``without_image_credentials()`` so the caller's value keeps its
    credentials after an export.
    """

    app_name: str
    app_version: str
    annotations: Dict[str, str] = field(default_factory=dict)
    components: List[Component] = field(default_factory=list)
    plugins: List[Plugin] = field(default_factory=list)
    k8s_resources: List[KubernetesResource] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("app_name", "app_version", "annotations", "components", "plugins", "k8s_resources")

    @property
    def component_images(self) -> List[str]:
        """Share images of components, in order"""
        return [c.share_image for c in self.components if c.share_image]

    @property
    def plugin_images(self) -> List[str]:
        """Share images of plugins, in order"""
        return [p.share_image for p in self.plugins if p.share_image]

    def without_image_credentials(self) -> 'ApplicationConfig':
        """Return a copy with every component and plugin image hub cleared"""
        sanitized = copy.deepcopy(self)
        for component in sanitized.components:
            component.app_image = ImageInfo()
        for plugin in sanitized.plugins:
            plugin.plugin_image = ImageInfo()
        return sanitized

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = dict(self.extra)
        data.update({
            "app_name": self.app_name,
            "app_version": self.app_version,
            "annotations": dict(self.annotations),
            "components": [c.to_dict() for c in self.components],
            "plugins": [p.to_dict() for p in self.plugins],
            "k8s_resources": [r.to_dict() for r in self.k8s_resources],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create from dictionary"""
        return cls(
            app_name=data["app_name"],
            app_version=data["app_version"],
            annotations=dict(data.get("annotations") or {}),
            components=[Component.from_dict(c) for c in data.get("components") or []],
            plugins=[Plugin.from_dict(p) for p in data.get("plugins") or []],
            k8s_resources=[KubernetesResource.from_dict(r) for r in data.get("k8s_resources") or []],
            extra=_split_extra(data, cls._KNOWN),
        )
