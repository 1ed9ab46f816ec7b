"""Default configuration tree"""
import copy
from typing import Any, Dict, Optional

POSTCSS_SETTINGS: Dict[str, Any] = {
    "options": {},
    "plugins": [
        "postcss-import",
        "cq-prolyfill/postcss-plugin",
        "postcss-font-magician",
        ["postcss-preset-env", {
            "stage": 2,
            "browsers": ["last 5 versions", ">= 1%", "ie >= 11"],
            "features": {"custom-properties": False},
        }],
        "css-mqpacker",
        "colorguard",
        ["cssnano", {"autoprefixer": False, "discardComments": {"removeAll": True}}],
        "postcss-reporter",
    ],
}

HTML_MINIFIER_SETTINGS: Dict[str, Any] = {
    "collapseBooleanAttributes": True,
    "collapseWhitespace": True,
    "conservativeCollapse": False,
    "ignoreCustomFragments": [r"<demo-snippet>[\s\S]*<\/demo-snippet>"],
    "minifyCSS": True,
    "minifyJS": True,
    "quoteCharacter": '"',
    "removeAttributeQuotes": False,
    "removeComments": True,
    "removeRedundantAttributes": True,
    "removeScriptTypeAttributes": True,
    "removeStyleLinkTypeAttributes": True,
    "trimCustomFragments": True,
    "useShortDoctype": True,
}

WCT_SETTINGS: Dict[str, Any] = {
    "suites": ["test/index.html"],
    "plugins": {
        "local": {
            "browserOptions": {"firefox": ["-headless"]},
            "browsers": ["firefox"],
            "disabled": False,
        },
    },
    "expanded": True,
    "npm": True,
    "compile": "never",
    "enforceJsonConf": True,
    "extraScripts": ["/test/test-component.js"],
}

_STATIC_DEFAULTS: Dict[str, Any] = {
    "build": {
        "module": {
            "create": True,
            "extension": ".mjs",
        },
        "script": {
            "create": True,
            "extension": ".js",
        },
        "cli": {
            "create": False,
            "entrypoint": "bin/cli.ts",
            "path": "bin",
        },
        "tools": {
            "development": {},
            "production": {
                "htmlMinifier": HTML_MINIFIER_SETTINGS,
                "postcss": POSTCSS_SETTINGS,
            },
            "test": {},
        },
    },
    "demos": {
        "path": "demo",
    },
    "dist": {
        "path": "dist",
        "files": ["LICENSE", "README.md"],
    },
    "docs": {
        "analysisFilename": "analysis.json",
        "nodeModulesPath": "vendor",
        "path": "docs",
    },
    "publish": {
        "archiveFormats": {
            "tar": {
                "extension": ".tar.gz",
                "ignore": False,
                "options": {"gzip": True, "gzipOptions": {"level": 6}},
            },
            "zip": {
                "extension": ".zip",
                "ignore": False,
                "options": {"zlib": {"level": 6}},
            },
        },
        "checkFiles": {
            "package": True,
            "script": True,
            "module": True,
            "license": True,
            "readme": True,
        },
        "dryrun": False,
        "force": False,
        "hostedOnGitHub": True,
        "masterBranch": "master",
        "prereleaseBranchRegex": r"^(?:[1-9][0-9]*)\.0-preview|master$",
        "runFileChecks": True,
        "runGitChecks": True,
    },
    "src": {
        "path": "src",
        "entrypoint": "**/*{[!.d].ts,.js}",
        "configFiles": {
            "tsconfig": "../tsconfig.json",
            "tslint": "../tslint.json",
            "styleLint": "../.stylelintrc.json",
        },
    },
    "temp": {
        "path": ".tmp",
    },
    "tests": {
        "path": "test",
        "testFiles": "index.ts",
        "configFiles": {
            "tsconfig": "tsconfig.json",
            "tslint": "tslint.json",
            "styleLint": "../.stylelintrc.json",
        },
    },
}


def is_ci(ci: Optional[str]) -> bool:
    """``CI`` counts as set unless it is missing or the string "false"."""
    return not (ci is None or ci == "false")


def wct_config(ci: Optional[str]) -> Dict[str, Any]:
    """
    Web Component Tester settings

    Outside CI a local chrome target is added next to firefox.
    """
    config = copy.deepcopy(WCT_SETTINGS)
    if not is_ci(ci):
        local = config["plugins"]["local"]
        local["browserOptions"]["chrome"] = ["headless"]
        local["browsers"].append("chrome")
        local["disabled"] = False
    return config


def default_config(ci: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a fresh default configuration tree

    Args:
        ci: Value of the ``CI`` environment variable (``None`` when unset)

    Returns:
        A new tree; callers may mutate it freely
    """
    config = copy.deepcopy(_STATIC_DEFAULTS)
    config["tests"]["wctConfig"] = wct_config(ci)
    return config
