"""
Command-line interface for IPGOT
"""

import argparse
import json
import logging
from dataclasses import asdict
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

from ipgot.core.config import Config
from ipgot.core.exceptions import IPGotError, ValidationError
from ipgot.core.models import LookupReport
from ipgot.services.ip_lookup import IPLookupService
from ipgot.utils.validation import Validator

# Initialize colorama for cross-platform color support
colorama_init(autoreset=True)

# Console color definitions
class Colors:
    GREEN = Fore.GREEN
    YELLOW = Fore.YELLOW
    WHITE = Fore.WHITE
    BLUE = Fore.CYAN
    RED = Fore.RED
    DIM = Style.DIM
    RESET = Style.RESET_ALL

FIELD_LABELS = (
    ("ip", "IP"),
    ("city", "City"),
    ("region", "Region"),
    ("country", "Country"),
    ("loc", "Location"),
    ("org", "Organization"),
    ("isp", "ISP"),
    ("asn", "ASN"),
    ("postal", "Postal"),
    ("timezone", "Timezone"),
    ("hostname", "Hostname"),
)

class CLI:
    """Command-line interface for IPGOT"""

    def __init__(self, config: Config, ip_lookup: Optional[IPLookupService] = None):
        """
        Initialize CLI

        Args:
            config: Configuration object
            ip_lookup: Lookup service (optional)
        """
        self.config = config
        self.ip_lookup = ip_lookup or IPLookupService(config)

    def run(self, args: List[str]) -> int:
        """
        Run CLI with arguments

        Args:
            args: Command-line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        if parsed_args.json:
            self.config.json_output = True
        if parsed_args.pretty:
            self.config.json_output = True
            self.config.json_pretty = True
        if parsed_args.monochrome:
            self.config.monochrome = True

        target = parsed_args.target or ""
        try:
            Validator.validate_query_ip(target)
            report = self.ip_lookup.lookup(target)
        except ValidationError as e:
            print(f"Error: {e}: {target}")
            return 1
        except IPGotError as e:
            print(f"Error: {e}")
            return 1
        except Exception as e:
            logging.error(f"Unexpected error: {e}", exc_info=True)
            print(f"An unexpected error occurred: {e}")
            return 1

        if self.config.json_output:
            self._output_json(report)
        else:
            self._output_report(report)

        return 0 if report.succeeded else 2

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="ipgot",
            description="IP information lookup with synthetic threat analysis",
        )
        parser.add_argument("target", nargs="?", help="IPv4 address (default: your own address)")
        parser.add_argument("-j", "--json", action="store_true", help="Output JSON")
        parser.add_argument("--pretty", action="store_true", help="Output indented JSON")
        parser.add_argument("-m", "--monochrome", action="store_true", help="Disable colors")
        return parser

    def _color(self, color: str, text: str) -> str:
        if self.config.monochrome:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _output_json(self, report: LookupReport):
        data = {
            "query": report.display_ip,
            "result": asdict(report.result),
            "analysis": asdict(report.analysis) if report.analysis else None,
        }
        indent = 2 if self.config.json_pretty else None
        print(json.dumps(data, indent=indent, ensure_ascii=False))

    def _output_report(self, report: LookupReport):
        result = report.result
        title = report.display_ip or "your address"
        print(self._color(Colors.GREEN, f"IP information for {title}"))

        if result.error:
            print(self._color(Colors.RED, result.message))
            return

        data = result.to_dict()
        for key, label in FIELD_LABELS:
            if data.get(key):
                print(f"  {self._color(Colors.BLUE, label.ljust(14))}{data[key]}")
        print(self._color(Colors.DIM, f"  (source: {result.source})"))

        analysis = report.analysis
        if analysis is None:
            return

        score_color = Colors.RED if analysis.risk_score > 80 else (
            Colors.YELLOW if analysis.risk_score > 50 else Colors.GREEN)

        print()
        print(self._color(Colors.GREEN, "Analysis (synthetic)"))
        print(f"  {'IP type'.ljust(14)}{analysis.ip_type}")
        print(f"  {'Risk'.ljust(14)}"
              f"{self._color(score_color, f'{analysis.risk_score}/100 {analysis.risk_level}')}")
        print(f"  {'Threat'.ljust(14)}{analysis.threat_analysis.description}")
        for rec in analysis.threat_analysis.recommendations:
            print(f"  {''.ljust(14)}- {rec}")
        print(f"  {'Hosting'.ljust(14)}{analysis.hosting_provider}")
        proxy = analysis.proxy_detection
        print(f"  {'Proxy'.ljust(14)}{proxy.type} ({proxy.confidence})")

        print(self._color(Colors.BLUE, "  ASN history"))
        for entry in analysis.asn_history:
            marker = "*" if entry.current else " "
            print(f"   {marker} {entry.date}  {entry.asn} - {entry.org}")

        print(self._color(Colors.BLUE, "  Registration history"))
        for entry in analysis.registration_history:
            marker = "*" if entry.current else " "
            print(f"   {marker} {entry.date}  {entry.city}, {entry.region}, {entry.country}")

        blacklist = analysis.blacklist_status
        status_color = Colors.RED if blacklist.is_listed else Colors.GREEN
        print(self._color(Colors.BLUE, "  Blacklists ") +
              self._color(status_color, "已列入" if blacklist.is_listed else "未列入"))
        for entry in blacklist.lists:
            print(f"     {entry.list.ljust(12)}{entry.status}  {entry.last_checked}")
