# cli.py
import argparse
import sys
import traceback
import logging

from subwriter import output, results, utils

logger = logging.getLogger("subwriter")

def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="subwriter", description="Write subdomain results as plain text or JSON lines")
    p.add_argument("--input", "-i", required=True, help="Results file (JSON lines or host[,ip[,source]] lines)")
    p.add_argument("--output", "-o", default="", help="Output file name (default: stdout)")
    p.add_argument("--output-dir", "-D", default="", help="Directory for the output file (created if missing)")
    p.add_argument("--append", action="store_true", help="Append to the output file instead of truncating it")
    p.add_argument("--json", "-j", action="store_true", help="Write one JSON object per line")
    view = p.add_mutually_exclusive_group()
    view.add_argument("--host-only", action="store_true", help="Write hosts and sources only (no addresses)")
    view.add_argument("--no-wildcard", "-nW", action="store_true", help="Write resolved hosts without their addresses")
    view.add_argument("--chaos", action="store_true", help="Write the bare host list for the Chaos export (always plain)")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return p.parse_args(argv)

def write_results(outputter: output.Outputter, found, args, writer):
    """Dispatch to the writer operation selected on the command line."""
    if args.chaos:
        outputter.write_for_chaos(found, writer)
    elif args.no_wildcard:
        outputter.write_host_no_wildcard(found, writer)
    elif args.host_only:
        hosts = {host: r.to_host_entry() for host, r in found.items()}
        outputter.write_host(hosts, writer)
    else:
        outputter.write_host_ip(found, writer)

def main(argv=None):
    args = parse_args(argv)
    utils.setup_logging(args.verbose)

    try:
        found = results.load_results(args.input)
    except results.ResultsFileError as e:
        logger.error(f"Could not load results: {e}")
        return 1
    logger.info(f"Loaded {len(found)} unique hosts from {args.input}")

    outputter = output.Outputter(json=args.json)
    try:
        if args.output:
            with outputter.create_file(args.output, args.output_dir, args.append) as fh:
                write_results(outputter, found, args, fh)
                destination = fh.name
        else:
            write_results(outputter, found, args, sys.stdout)
            destination = "stdout"
    except (output.InvalidArgumentError, output.OutputIOError) as e:
        logger.error(f"Error writing output: {e}")
        logger.debug(traceback.format_exc())
        return 1

    logger.info(f"Wrote {len(found)} results to {destination}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
