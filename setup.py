from setuptools import find_packages, setup

# Minimal setup.py to allow pip installation in environments (like p4a) that
# default to legacy builds and need explicit python_requires.

package_list = find_packages(
  include=[
    "entrypoints",
    "entrypoints.*",
    "splash_gate",
    "splash_gate.*",
    "os_interfaces",
    "os_interfaces.*",
  ]
)

setup(
  name="splash-gate",
  version="0.1.0",
  description="Launch-time remote config gate for a WebView wrapper app",
  python_requires=">=3.11",
  packages=package_list,
  include_package_data=True,
  package_data={"splash_gate": ["assets/*.jpg"]},
  install_requires=[
    "pywebview",
    "pyyaml",
    "pydantic",
    "python-dotenv",
    "platformdirs",
    "httpx",
    "Pillow",
  ],
  extras_require={
    "android": ["pyjnius", "cython==3.0.12", "buildozer"],
    "dev": ["pytest", "pytest-cov"],
  },
  entry_points={
    "console_scripts": [
      "splash-gate=entrypoints.splash_app_linux:main",
    ],
  },
)
