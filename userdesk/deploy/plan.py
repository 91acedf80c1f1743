"""The default deploy plan: images first, then manifests, then the optional ingress."""

from pathlib import Path
from typing import List

from userdesk.deploy.steps import ApplyManifest, BuildImage, CheckPrerequisite, PushImage, Step, WaitForCondition

PREREQUISITES = ("docker", "kubectl", "az")

# (image name, build context)
IMAGES = (
    ("backend-api", "./backend"),
    ("frontend-app", "./frontend"),
)

MANIFESTS = (
    "namespace.yaml",
    "backend-deployment.yaml",
    "backend-service.yaml",
    "frontend-deployment.yaml",
    "frontend-service.yaml",
    "configmap.yaml",
    "hpa.yaml",
)

INGRESS_MANIFEST = "ingress.yaml"


def prerequisite_steps() -> List[Step]:
    return [CheckPrerequisite(tool) for tool in PREREQUISITES]


def ingress_probe(namespace: str) -> List[str]:
    return [
        "kubectl", "get", "ingress",
        "-n", namespace,
        "-o", "jsonpath={.items[0].status.loadBalancer.ingress[0].ip}",
    ]


def build_plan(
    registry: str,
    tag: str = "latest",
    manifests_dir: str = "k8s",
    namespace: str = "microservice-demo",
    with_ingress: bool = False,
    attempts: int = 30,
    interval: float = 10.0,
) -> List[Step]:
    """
    Build the ordered list of deploy steps.

    Args:
        registry: Image registry prefix, e.g. ``myregistry.azurecr.io``
        tag: Image tag for both images
        manifests_dir: Directory holding the Kubernetes manifests
        namespace: Namespace the ingress readiness probe looks in
        with_ingress: Also apply the ingress and wait for its address
        attempts: Readiness probe attempts
        interval: Seconds between readiness probe attempts
    """
    steps = prerequisite_steps()

    for image, context in IMAGES:
        image_tag = f"{registry}/{image}:{tag}"
        steps.append(BuildImage(image_tag, context))
        steps.append(PushImage(image_tag))

    manifests = Path(manifests_dir)
    steps.extend(ApplyManifest(manifests / manifest) for manifest in MANIFESTS)

    if with_ingress:
        steps.append(ApplyManifest(manifests / INGRESS_MANIFEST))
        steps.append(WaitForCondition("ingress address", ingress_probe(namespace), attempts, interval))

    return steps


def next_steps(namespace: str) -> List[str]:
    """Operator hints printed after a successful deploy."""
    return [
        f"Check status with: kubectl get pods -n {namespace}",
        f"Get service URL with: kubectl get svc -n {namespace}",
    ]
