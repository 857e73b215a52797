from __future__ import annotations
from pathlib import Path

import pytest

PROJECT_XML = r"""<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<Project xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:noNamespaceSchemaLocation="project_projx.xsd">
  <SchemaVersion>2.1</SchemaVersion>
  <Targets>
    <Target>
      <TargetName>Debug</TargetName>
      <ToolsetNumber>0x4</ToolsetNumber>
      <TargetOption>
        <TargetCommonOption>
          <Device>STM32F103C8</Device>
          <Vendor>{vendor}</Vendor>
          <Cpu>IRAM(0x20000000,0x00005000) IROM(0x08000000,0x00010000) CPUTYPE("Cortex-M3") CLOCK(12000000) ELITTLE</Cpu>
          <OutputDirectory>.\Objects\</OutputDirectory>
          <OutputName>demo</OutputName>
          <ListingPath>.\Listings\</ListingPath>
        </TargetCommonOption>
        <TargetArmAds>
          <ArmAdsMisc>
            <AdsLLst>{map_flag}</AdsLLst>
            <OnChipMemories>
              <OCR_RVCT1>
                <Type>1</Type>
                <StartAddress>0x0</StartAddress>
                <Size>0x0</Size>
              </OCR_RVCT1>
              <OCR_RVCT4>
                <Type>1</Type>
                <StartAddress>0x8000000</StartAddress>
                <Size>0x10000</Size>
              </OCR_RVCT4>
              <OCR_RVCT6>
                <Type>0</Type>
                <StartAddress>0x60000000</StartAddress>
                <Size>0x100000</Size>
              </OCR_RVCT6>
              <OCR_RVCT9>
                <Type>0</Type>
                <StartAddress>0x20000000</StartAddress>
                <Size>0x5000</Size>
              </OCR_RVCT9>
            </OnChipMemories>
          </ArmAdsMisc>
          <Cads>
            <v6Lto>{lto}</v6Lto>
          </Cads>
          <LDads>
            <umfTarg>{umf}</umfTarg>
          </LDads>
        </TargetArmAds>
      </TargetOption>
      <Groups>
        <Group>
          <GroupName>App</GroupName>
          <Files>
            <File>
              <FileName>main.c</FileName>
              <FileType>1</FileType>
              <FilePath>..\src\main.c</FilePath>
            </File>
            <File>
              <FileName>util.c</FileName>
              <FileType>1</FileType>
              <FilePath>..\src\a\util.c</FilePath>
            </File>
            <File>
              <FileName>util.c</FileName>
              <FileType>1</FileType>
              <FilePath>..\src\b\util.c</FilePath>
            </File>
            <File>
              <FileName>readme.txt</FileName>
              <FileType>5</FileType>
              <FilePath>..\readme.txt</FilePath>
            </File>
            <File>
              <FileName>startup_stm32f10x_md.s</FileName>
              <FileType>2</FileType>
              <FilePath>.\startup_stm32f10x_md.s</FilePath>
            </File>
          </Files>
        </Group>
      </Groups>
    </Target>
  </Targets>
</Project>
"""

MAP_TEXT = """Component: ARM Compiler 5.06 update 7 (build 960) Tool: armlink [4d3601]

==============================================================================

Section Cross References

    main.o(.text) refers to util.o(.text) for util_init

==============================================================================

Memory Map of the image

  Image Entry point : 0x08000131

  Load Region LR_IROM1 (Base: 0x08000000, Size: 0x00000a50, Max: 0x00010000, ABSOLUTE)

    Execution Region ER_IROM1 (Exec base: 0x08000000, Load base: 0x08000000, Size: 0x00000a3c, Max: 0x00010000, ABSOLUTE)

    Exec Addr    Load Addr    Size         Type   Attr      Idx    E Section Name        Object

    0x08000000   0x08000000   0x00000130   Data   RO            3    RESET               startup_stm32f10x_md.o
    0x08000130   0x08000130   0x00000000   Code   RO          200  * .ARM.Collect$$$$00000000  mc_w.l(entry.o)

    Execution Region RW_IRAM1 (Exec base: 0x20000000, Load base: 0x08000a3c, Size: 0x00000660, Max: 0x00005000, ABSOLUTE)

    Exec Addr    Load Addr    Size         Type   Attr      Idx    E Section Name        Object

    0x20000000   0x08000a3c   0x00000014   Data   RW            5    .data               main.o
    0x20000014        -       0x00000040   Zero   RW            6    .bss                main.o
    0x20000054        -       0x00000004   PAD
    0x20000058        -       0x00000008   Zero   RW            7    .bss                util.o
    0x20000060        -       0x00000600   Zero   RW            8    STACK               startup_stm32f10x_md.o


==============================================================================

Image component sizes


      Code (inc. data)   RO Data    RW Data    ZI Data      Debug   Object Name

       172         10          0         20         64       1234   main.o
        36          0        304          0       1536        836   startup_stm32f10x_md.o
        64          4          0          0          8        512   util.o
        48          0          0          0          0        400   util_1.o

    ----------------------------------------------------------------------
       320         14        304         20       1608       2982   Object Totals
         0          0         16          0          0          0   (incl. Generated)
         0          0          0          0          0          0   (incl. Padding)

    ----------------------------------------------------------------------

      Code (inc. data)   RO Data    RW Data    ZI Data      Debug   Library Member Name

         0          0          0          0          0          0   entry.o

    ----------------------------------------------------------------------
        86          0          0          0          0          0   Library Totals

==============================================================================
"""

BUILD_LOG = """<html>
<body>
<pre>
<h1>µVision Build Log</h1>
Build target 'Debug'
'..\\src\\b\\util.c' - object file renamed from '.\\Objects\\util.o' to '.\\Objects\\util_1.o'.
compiling main.c...
compiling util.c...
'..\\src\\never.c' - object file renamed from '.\\Objects\\never.o' to '.\\Objects\\never_1.o'.
</pre>
</body>
</html>
"""

STACK_HTM = """<html><body>
<H3>Static Call Graph for image .\\Objects\\demo.axf</H3><HR>
<BR><P>#&#060CALLGRAPH&#062# ARM Linker, 5060960: Last Updated: Mon Oct 19 10:00:00 2026
<BR><P>
<H3>Maximum Stack Usage =        192 bytes + Unknown(Functions without stacksize, Cycles, Untraceable Function Pointers)</H3><H3>
Call chain for Maximum Stack Depth:</H3>
</body></html>
"""


def project_xml(vendor: str = "STMicroelectronics", map_flag: str = "1",
                lto: str = "0", umf: str = "1") -> str:
    return PROJECT_XML.format(vendor=vendor, map_flag=map_flag, lto=lto, umf=umf)


def write_tree(root: Path, xml: str | None = None, map_text: str | None = MAP_TEXT,
               build_log: str | None = BUILD_LOG, stack: str | None = STACK_HTM) -> Path:
    """proj/demo.uvprojx + Objects/ + Listings/ в стиле Keil."""
    proj = root / "proj"
    (proj / "Objects").mkdir(parents=True, exist_ok=True)
    (proj / "Listings").mkdir(parents=True, exist_ok=True)
    project_file = proj / "demo.uvprojx"
    project_file.write_text(xml if xml is not None else project_xml(), encoding="utf-8")
    if map_text is not None:
        (proj / "Listings" / "demo.map").write_text(map_text, encoding="utf-8")
    if build_log is not None:
        (proj / "Objects" / "demo.build_log.htm").write_text(build_log, encoding="utf-8")
    if stack is not None:
        (proj / "Objects" / "demo.htm").write_text(stack, encoding="utf-8")
    return project_file


@pytest.fixture
def keil_project(tmp_path) -> Path:
    return write_tree(tmp_path)


def lines_of(text: str):
    return iter(text.splitlines())
