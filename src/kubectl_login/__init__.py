"""kubectl-login.

Log in to a Kubernetes cluster through an OpenID Connect provider and switch kubectl to it.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
