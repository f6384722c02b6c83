"""HL7 v3 / SPL XML namespaces."""

HL7 = "v3"  # default namespace of SPL documents
XML_SCHEMA_INSTANCE = "xsi"
XML_SCHEMA = "xs"

nsmap = {
    HL7: "urn:hl7-org:v3",
    XML_SCHEMA_INSTANCE: "http://www.w3.org/2001/XMLSchema-instance",
    XML_SCHEMA: "http://www.w3.org/2001/XMLSchema",
}

XSI_TYPE = f"{{{nsmap[XML_SCHEMA_INSTANCE]}}}type"


def register():
    # Necessary to get ElementTree to output XML with the familiar prefixes.
    from xml.etree import ElementTree

    ElementTree.register_namespace("", nsmap[HL7])
    ElementTree.register_namespace(XML_SCHEMA_INSTANCE, nsmap[XML_SCHEMA_INSTANCE])
