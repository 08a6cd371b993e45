# app_packager/exporters/__init__.py
"""Export format implementations"""

from .base import AppExporter
from .docker_compose import DockerComposeExporter
from .factory import ExporterFactory
from .helm_chart import HelmChartExporter
from .k8s_yaml import K8sYamlExporter
from .ram import RamExporter

__all__ = [
    "AppExporter",
    "DockerComposeExporter",
    "ExporterFactory",
    "HelmChartExporter",
    "K8sYamlExporter",
    "RamExporter",
]
